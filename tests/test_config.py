import logging

import pytest

from chains.config import Settings
from chains.errors import ConfigurationError
from chains.logs import configure_logging

SETTINGS_ENV = (
    "LLM_PROVIDER",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_EMBEDDING_MODEL",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_VERSION",
    "AZURE_OPENAI_DEPLOYMENT",
    "AZURE_OPENAI_EMBEDDING_DEPLOYMENT",
    "LLM_TEMPERATURE",
    "LLM_TIMEOUT_SECONDS",
    "AGENT_MAX_ITERATIONS",
    "LOG_LEVEL",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults_when_environment_is_empty(clean_env):
    settings = Settings.from_env()

    assert settings.provider == "openai"
    assert settings.openai_model == "gpt-4o-mini"
    assert settings.embedding_model == "text-embedding-3-small"
    assert settings.temperature == 0.0
    assert settings.timeout == 60.0
    assert settings.max_iterations == 10
    assert settings.log_level == "INFO"


def test_values_are_read_from_environment(clean_env):
    clean_env.setenv("LLM_PROVIDER", "Azure_OpenAI")
    clean_env.setenv("LLM_TEMPERATURE", "0.7")
    clean_env.setenv("AGENT_MAX_ITERATIONS", "3")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.provider == "azure_openai"
    assert settings.temperature == 0.7
    assert settings.max_iterations == 3
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LLM_TEMPERATURE", "warm"),
        ("LLM_TIMEOUT_SECONDS", "soon"),
        ("AGENT_MAX_ITERATIONS", "0"),
        ("LOG_LEVEL", "LOUD"),
    ],
)
def test_malformed_values_are_configuration_errors(clean_env, name, value):
    clean_env.setenv(name, value)

    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_unknown_log_level_is_named_in_the_error(clean_env):
    clean_env.setenv("LOG_LEVEL", "loud")

    with pytest.raises(ConfigurationError, match="LOG_LEVEL must be one of .*got 'loud'"):
        Settings.from_env()


def test_require_azure_returns_resolved_deployment():
    settings = Settings(azure_api_key="key", azure_endpoint="https://example.openai.azure.com", azure_deployment="chat")

    assert settings.require_azure() == ("key", "https://example.openai.azure.com", "chat")
    assert settings.require_azure("other")[2] == "other"


def test_configure_logging_replaces_handlers():
    configure_logging("debug")
    configure_logging("warning")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.WARNING
    assert logging.getLogger("openai").level == logging.WARNING
