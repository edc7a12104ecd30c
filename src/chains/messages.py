"""Conversation turn primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

ROLE_ALIASES = {
    "human": "user",
    "ai": "assistant",
}
ROLES = ("system", "user", "assistant", "tool")


def normalize_role(role: str) -> str:
    """Map external role names (``human``, ``AI``) onto provider roles."""
    lowered = role.strip().lower()
    resolved = ROLE_ALIASES.get(lowered, lowered)
    if resolved not in ROLES:
        raise ValueError(f"Unknown message role '{role}'. Expected one of: {', '.join(ROLES)}.")
    return resolved


@dataclass(frozen=True)
class ToolCall:
    """A model's request to invoke one tool."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatMessage:
    """One role-tagged turn of a transcript."""

    role: str
    content: str
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", normalize_role(self.role))
        object.__setattr__(self, "tool_calls", tuple(self.tool_calls))

    def pretty(self) -> str:
        """Return the message as a CLI-friendly string."""
        return f"[{self.role}] {self.content.strip()}"


def system_message(content: str) -> ChatMessage:
    return ChatMessage(role="system", content=content)


def user_message(content: str) -> ChatMessage:
    return ChatMessage(role="user", content=content)


def ai_message(content: str) -> ChatMessage:
    return ChatMessage(role="assistant", content=content)


def coerce_message(value: ChatMessage | Mapping[str, Any] | tuple[str, str]) -> ChatMessage:
    """Accept ``ChatMessage``, ``{"role", "content"}`` dicts or ``(role, content)`` pairs."""
    if isinstance(value, ChatMessage):
        return value
    if isinstance(value, Mapping):
        return ChatMessage(role=str(value.get("role", "")), content=str(value.get("content", "")))
    if isinstance(value, tuple) and len(value) == 2:
        role, content = value
        return ChatMessage(role=role, content=content)
    raise TypeError(f"Cannot interpret {type(value).__name__} as a chat message")


def render_transcript(messages: Iterable[ChatMessage], *, human_prefix: str = "Human", ai_prefix: str = "AI") -> str:
    """Render user/assistant turns as ``Human: ...`` / ``AI: ...`` lines."""
    lines: list[str] = []
    for message in messages:
        if message.role == "user":
            prefix = human_prefix
        elif message.role == "assistant":
            prefix = ai_prefix
        elif message.role == "system":
            prefix = "System"
        else:
            prefix = "Tool"
        lines.append(f"{prefix}: {message.content}")
    return "\n".join(lines)


__all__ = [
    "ChatMessage",
    "ToolCall",
    "normalize_role",
    "system_message",
    "user_message",
    "ai_message",
    "coerce_message",
    "render_transcript",
]
