"""Prompt templates with literal ``{placeholder}`` substitution."""

from __future__ import annotations

from dataclasses import dataclass
from string import Formatter
from typing import Any, Iterable, Mapping, Sequence, Union

from .errors import MissingVariableError
from .messages import ChatMessage, coerce_message, normalize_role
from .pipeline import Runnable

_FORMATTER = Formatter()


def extract_variables(template: str) -> list[str]:
    """Return placeholder names in order of first appearance."""
    names: list[str] = []
    for _, field_name, format_spec, _ in _FORMATTER.parse(template):
        if field_name is None:
            continue
        if not field_name:
            raise ValueError("Positional '{}' placeholders are not supported; name every variable")
        base = field_name.split(".", 1)[0].split("[", 1)[0]
        # "{price:{width}}" also needs width
        nested = extract_variables(format_spec) if format_spec else []
        for name in [base, *nested]:
            if name not in names:
                names.append(name)
    return names


def _as_mapping(value: Any, input_variables: Sequence[str]) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    if len(input_variables) == 1:
        return {input_variables[0]: value}
    raise TypeError(
        f"Expected a mapping of template variables, got {type(value).__name__}; "
        f"variables are: {', '.join(input_variables) or '(none)'}"
    )


@dataclass(frozen=True)
class PromptValue:
    """Rendered model input."""

    messages: tuple[ChatMessage, ...]

    def to_messages(self) -> list[ChatMessage]:
        return list(self.messages)

    def to_string(self) -> str:
        if len(self.messages) == 1:
            return self.messages[0].content
        labels = {"system": "System", "user": "Human", "assistant": "AI", "tool": "Tool"}
        return "\n".join(f"{labels[message.role]}: {message.content}" for message in self.messages)


class PromptTemplate(Runnable):
    """Single string template."""

    def __init__(self, template: str, *, partial_variables: Mapping[str, Any] | None = None) -> None:
        self.template = template
        self.partial_variables = dict(partial_variables or {})
        self._variables = extract_variables(template)

    @property
    def input_variables(self) -> list[str]:
        return [name for name in self._variables if name not in self.partial_variables]

    def partial(self, **values: Any) -> "PromptTemplate":
        return PromptTemplate(self.template, partial_variables={**self.partial_variables, **values})

    def format(self, **values: Any) -> str:
        merged = {**self.partial_variables, **values}
        missing = [name for name in self._variables if name not in merged]
        if missing:
            raise MissingVariableError(missing)
        return self.template.format(**merged)

    def invoke(self, value: Any) -> PromptValue:  # noqa: D401
        rendered = self.format(**_as_mapping(value, self.input_variables))
        return PromptValue(messages=(ChatMessage(role="user", content=rendered),))


@dataclass(frozen=True)
class MessagesPlaceholder:
    """Slot for a list of messages (chat history, agent scratchpad)."""

    variable_name: str
    optional: bool = False


MessageLike = Union[MessagesPlaceholder, ChatMessage, tuple[str, str]]


@dataclass(frozen=True)
class _MessageTemplate:
    role: str
    prompt: PromptTemplate


def _placeholder_messages(placeholder: MessagesPlaceholder, value: Any) -> list[ChatMessage]:
    if value is None:
        return []
    history = getattr(value, "messages", value)
    if isinstance(history, (str, bytes)):
        raise TypeError(f"Variable '{placeholder.variable_name}' must be a list of messages, got a string")
    return [coerce_message(item) for item in history]


class ChatPromptTemplate(Runnable):
    """Sequence of role-tagged message templates and message placeholders."""

    def __init__(
        self,
        parts: Iterable[MessagesPlaceholder | ChatMessage | _MessageTemplate],
        *,
        partial_variables: Mapping[str, Any] | None = None,
    ) -> None:
        self._parts = tuple(parts)
        self.partial_variables = dict(partial_variables or {})

    @classmethod
    def from_template(cls, template: str) -> "ChatPromptTemplate":
        return cls([_MessageTemplate(role="user", prompt=PromptTemplate(template))])

    @classmethod
    def from_messages(cls, messages: Iterable[MessageLike]) -> "ChatPromptTemplate":
        parts: list[MessagesPlaceholder | ChatMessage | _MessageTemplate] = []
        for message in messages:
            if isinstance(message, (MessagesPlaceholder, ChatMessage)):
                parts.append(message)
            elif isinstance(message, tuple) and len(message) == 2:
                role, template = message
                parts.append(_MessageTemplate(role=normalize_role(role), prompt=PromptTemplate(template)))
            else:
                raise TypeError(f"Unsupported prompt message: {message!r}")
        return cls(parts)

    @property
    def input_variables(self) -> list[str]:
        names: list[str] = []
        for part in self._parts:
            if isinstance(part, _MessageTemplate):
                candidates = part.prompt.input_variables
            elif isinstance(part, MessagesPlaceholder) and not part.optional:
                candidates = [part.variable_name]
            else:
                candidates = []
            for name in candidates:
                if name not in names and name not in self.partial_variables:
                    names.append(name)
        return names

    def partial(self, **values: Any) -> "ChatPromptTemplate":
        return ChatPromptTemplate(self._parts, partial_variables={**self.partial_variables, **values})

    def format_messages(self, **values: Any) -> list[ChatMessage]:
        merged = {**self.partial_variables, **values}
        missing = [name for name in self.input_variables if name not in merged]
        if missing:
            raise MissingVariableError(missing)

        rendered: list[ChatMessage] = []
        for part in self._parts:
            if isinstance(part, ChatMessage):
                rendered.append(part)
            elif isinstance(part, MessagesPlaceholder):
                rendered.extend(_placeholder_messages(part, merged.get(part.variable_name)))
            else:
                rendered.append(ChatMessage(role=part.role, content=part.prompt.format(**merged)))
        return rendered

    def format(self, **values: Any) -> str:
        return PromptValue(messages=tuple(self.format_messages(**values))).to_string()

    def invoke(self, value: Any) -> PromptValue:  # noqa: D401
        return PromptValue(messages=tuple(self.format_messages(**_as_mapping(value, self.input_variables))))


__all__ = [
    "PromptTemplate",
    "ChatPromptTemplate",
    "MessagesPlaceholder",
    "PromptValue",
    "extract_variables",
]
