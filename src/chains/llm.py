"""Chat model clients with multi-provider support."""

from __future__ import annotations

import json
import logging
from abc import abstractmethod
from typing import Any, Mapping, Sequence

import openai
from openai import AzureOpenAI, OpenAI

from .config import Settings
from .errors import ModelTimeoutError
from .messages import ChatMessage, ToolCall, coerce_message
from .pipeline import Runnable
from .prompts import PromptValue

logger = logging.getLogger(__name__)


def coerce_messages(value: Any) -> list[ChatMessage]:
    """Accept a plain string, a rendered prompt, or a message sequence."""
    if isinstance(value, str):
        return [ChatMessage(role="user", content=value)]
    if isinstance(value, PromptValue):
        return value.to_messages()
    if isinstance(value, ChatMessage):
        return [value]
    if isinstance(value, Sequence):
        return [coerce_message(item) for item in value]
    raise TypeError(f"Cannot send {type(value).__name__} to a chat model")


def _to_provider_message(message: ChatMessage) -> dict[str, Any]:
    payload: dict[str, Any] = {"role": message.role, "content": message.content}
    if message.role == "assistant" and message.tool_calls:
        payload["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": json.dumps(call.arguments, ensure_ascii=False)},
            }
            for call in message.tool_calls
        ]
    if message.role == "tool":
        payload["tool_call_id"] = message.tool_call_id
    return payload


def _decode_arguments(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Model produced tool arguments that are not valid JSON: %r", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


def _from_provider_message(message: Any) -> ChatMessage:
    tool_calls = tuple(
        ToolCall(id=call.id, name=call.function.name, arguments=_decode_arguments(call.function.arguments))
        for call in (getattr(message, "tool_calls", None) or [])
    )
    return ChatMessage(role="assistant", content=message.content or "", tool_calls=tool_calls)


class ChatModel(Runnable):
    """Protocol for chat model backends."""

    def invoke(self, value: Any, *, tools: Sequence[Mapping[str, Any]] | None = None) -> ChatMessage:  # noqa: D401
        return self.generate(coerce_messages(value), tools=tools)

    @abstractmethod
    def generate(
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: Sequence[Mapping[str, Any]] | None = None,
    ) -> ChatMessage:
        """Send one request and return the assistant turn."""


class _ChatCompletionsModel(ChatModel):
    """Shared request path for OpenAI-compatible chat completion clients."""

    def __init__(self, client: Any, model: str, *, temperature: float, timeout: float) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._timeout = timeout

    @property
    def model_name(self) -> str:
        return self._model

    def generate(  # noqa: D401
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: Sequence[Mapping[str, Any]] | None = None,
    ) -> ChatMessage:
        if not messages:
            raise ValueError("At least one message is required")

        request: dict[str, Any] = {
            "model": self._model,
            "messages": [_to_provider_message(message) for message in messages],
            "temperature": self._temperature,
            "timeout": self._timeout,
        }
        if tools:
            request["tools"] = list(tools)

        logger.debug("Calling %s with %d message(s), %d tool(s)", self._model, len(messages), len(tools or ()))
        try:
            response = self._client.chat.completions.create(**request)
        except openai.APITimeoutError as exc:
            raise ModelTimeoutError(f"{self._model} did not respond within {self._timeout} seconds") from exc

        return _from_provider_message(response.choices[0].message)


class OpenAIChatModel(_ChatCompletionsModel):
    """Chat model backed by the OpenAI API."""

    def __init__(
        self,
        model: str | None = None,
        *,
        temperature: float | None = None,
        timeout: float | None = None,
        client: OpenAI | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings.from_env()
        if client is None:
            client = OpenAI(api_key=settings.require_openai_key())
        super().__init__(
            client,
            model or settings.openai_model,
            temperature=settings.temperature if temperature is None else temperature,
            timeout=settings.timeout if timeout is None else timeout,
        )


class AzureOpenAIChatModel(_ChatCompletionsModel):
    """Chat model backed by an Azure OpenAI deployment."""

    def __init__(
        self,
        deployment: str | None = None,
        *,
        temperature: float | None = None,
        timeout: float | None = None,
        client: AzureOpenAI | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings.from_env()
        if client is None:
            api_key, endpoint, deployment = settings.require_azure(deployment)
            client = AzureOpenAI(api_key=api_key, azure_endpoint=endpoint, api_version=settings.azure_api_version)
        elif deployment is None:
            deployment = settings.azure_deployment
        if not deployment:
            raise ValueError("An Azure OpenAI deployment name is required")
        super().__init__(
            client,
            deployment,
            temperature=settings.temperature if temperature is None else temperature,
            timeout=settings.timeout if timeout is None else timeout,
        )


def build_chat_model_from_env(settings: Settings | None = None) -> ChatModel:
    settings = settings or Settings.from_env()

    if settings.provider == "openai":
        return OpenAIChatModel(settings=settings)
    if settings.provider == "azure_openai":
        return AzureOpenAIChatModel(settings=settings)

    raise ValueError("Unsupported LLM_PROVIDER. Expected one of: openai, azure_openai.")


__all__ = [
    "ChatModel",
    "OpenAIChatModel",
    "AzureOpenAIChatModel",
    "build_chat_model_from_env",
    "coerce_messages",
]
