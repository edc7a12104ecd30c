"""Conversation history held by the caller, plus a buffer-style memory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .errors import MissingVariableError
from .messages import ChatMessage, ai_message, coerce_message, render_transcript, user_message
from .parsers import OutputParser, StrOutputParser
from .pipeline import Pipeline, Runnable
from .prompts import ChatPromptTemplate, PromptTemplate


@dataclass
class ChatHistory:
    """Ordered transcript owned by the caller for the lifetime of one session.

    Pass the same instance into each turn; the turn handler appends to it and
    hands it back.
    """

    turns: list[ChatMessage] = field(default_factory=list)

    @classmethod
    def from_messages(cls, messages: Iterable[Any]) -> "ChatHistory":
        return cls(turns=[coerce_message(message) for message in messages])

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self.turns)

    def add_message(self, message: ChatMessage) -> None:
        self.turns.append(message)

    def add_user_message(self, content: str) -> None:
        self.add_message(user_message(content))

    def add_ai_message(self, content: str) -> None:
        self.add_message(ai_message(content))

    def clear(self) -> None:
        self.turns.clear()

    def __len__(self) -> int:
        return len(self.turns)


class ConversationBufferMemory:
    """Keeps every exchange and exposes it as a single prompt variable."""

    def __init__(
        self,
        *,
        memory_key: str = "history",
        input_key: str = "input",
        output_key: str = "output",
        history: ChatHistory | None = None,
    ) -> None:
        self.memory_key = memory_key
        self.input_key = input_key
        self.output_key = output_key
        self.history = history if history is not None else ChatHistory()

    def load_memory_variables(self) -> dict[str, str]:
        return {self.memory_key: render_transcript(self.history.messages)}

    def save_context(self, inputs: Mapping[str, Any], outputs: Mapping[str, Any]) -> None:
        if self.input_key not in inputs:
            raise MissingVariableError([self.input_key])
        if self.output_key not in outputs:
            raise MissingVariableError([self.output_key])
        self.history.add_user_message(str(inputs[self.input_key]))
        self.history.add_ai_message(str(outputs[self.output_key]))

    def clear(self) -> None:
        self.history.clear()


class ConversationChain(Runnable):
    """prompt -> model -> parser, with the buffer memory injected and updated on every call."""

    def __init__(
        self,
        model: Runnable,
        prompt: PromptTemplate | ChatPromptTemplate,
        memory: ConversationBufferMemory | None = None,
        parser: OutputParser | None = None,
    ) -> None:
        self.memory = memory or ConversationBufferMemory()
        if self.memory.memory_key not in prompt.input_variables:
            raise ValueError(f"Prompt must declare the '{self.memory.memory_key}' variable")
        self._pipeline = Pipeline(prompt, model, parser or StrOutputParser())

    def invoke(self, value: Any) -> Any:  # noqa: D401
        inputs = value if isinstance(value, Mapping) else {self.memory.input_key: value}
        answer = self._pipeline.invoke({**inputs, **self.memory.load_memory_variables()})
        self.memory.save_context(inputs, {self.memory.output_key: answer})
        return answer


__all__ = ["ChatHistory", "ConversationBufferMemory", "ConversationChain"]
