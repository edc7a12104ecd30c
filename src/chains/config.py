"""Environment-driven settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_AZURE_API_VERSION = "2024-05-01-preview"


def _env_log_level(name: str, default: str) -> str:
    raw = os.getenv(name)
    level = (raw or default).strip().upper()
    if level not in logging.getLevelNamesMapping():
        allowed = ", ".join(sorted(logging.getLevelNamesMapping()))
        raise ConfigurationError(f"{name} must be one of {allowed}, got {raw!r}")
    return level


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment used to build models and agents."""

    provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    azure_api_key: str | None = None
    azure_endpoint: str | None = None
    azure_api_version: str = DEFAULT_AZURE_API_VERSION
    azure_deployment: str | None = None
    azure_embedding_deployment: str | None = None
    temperature: float = 0.0
    timeout: float = 60.0
    max_iterations: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            provider=(os.getenv("LLM_PROVIDER") or "openai").lower(),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL") or DEFAULT_EMBEDDING_MODEL,
            azure_api_key=os.getenv("AZURE_OPENAI_API_KEY"),
            azure_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT"),
            azure_api_version=os.getenv("AZURE_OPENAI_API_VERSION") or DEFAULT_AZURE_API_VERSION,
            azure_deployment=os.getenv("AZURE_OPENAI_DEPLOYMENT"),
            azure_embedding_deployment=os.getenv("AZURE_OPENAI_EMBEDDING_DEPLOYMENT"),
            temperature=_env_float("LLM_TEMPERATURE", 0.0),
            timeout=_env_float("LLM_TIMEOUT_SECONDS", 60.0),
            max_iterations=_env_int("AGENT_MAX_ITERATIONS", 10),
            log_level=_env_log_level("LOG_LEVEL", "INFO"),
        )

    def require_openai_key(self) -> str:
        if not self.openai_api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is not set. Add it to your environment or a .env file."
            )
        return self.openai_api_key

    def require_azure(self, deployment: str | None = None) -> tuple[str, str, str]:
        """Return ``(api_key, endpoint, deployment)`` or fail when any is missing."""
        resolved = deployment or self.azure_deployment
        if not all([self.azure_api_key, self.azure_endpoint, resolved]):
            raise ConfigurationError("Azure OpenAI configuration is incomplete")
        return self.azure_api_key, self.azure_endpoint, resolved  # type: ignore[return-value]


__all__ = ["Settings"]
