"""Tool-calling agent loop."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from pydantic import BaseModel, Field, ValidationError

from .config import Settings
from .errors import AgentExhaustedError
from .llm import ChatModel
from .memory import ChatHistory
from .messages import ChatMessage, ToolCall
from .prompts import ChatPromptTemplate, MessagesPlaceholder

logger = logging.getLogger(__name__)

DEFAULT_AGENT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer the user's question directly when you can. "
    "Call one of the available tools when it is needed to answer correctly. No yapping."
)


class QueryInput(BaseModel):
    query: str = Field(description="The search query or question to look up.")


class ToolNotFoundError(LookupError):
    """Raised when the model names a tool that is not registered."""


@dataclass(frozen=True)
class Tool:
    """A callable the model may decide to invoke."""

    name: str
    description: str
    func: Callable[..., Any]
    args_schema: type[BaseModel] = QueryInput

    def spec(self) -> dict[str, Any]:
        """Provider tool schema (function-calling format)."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description.strip(),
                "parameters": self.args_schema.model_json_schema(),
            },
        }

    def run(self, arguments: dict[str, Any]) -> str:
        validated = self.args_schema.model_validate(arguments)
        result = self.func(**validated.model_dump())
        if isinstance(result, str):
            return result
        return json.dumps(result, ensure_ascii=False, default=str)


class Toolbox:
    """Name -> tool lookup with duplicate detection."""

    def __init__(self, tools: Iterable[Tool]) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name '{tool.name}'")
            self._tools[tool.name] = tool

    def get(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError as exc:
            raise ToolNotFoundError(f"Unknown tool '{name}'. Available: {', '.join(self._tools) or '(none)'}") from exc

    def specs(self) -> list[dict[str, Any]]:
        return [tool.spec() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)


@dataclass(frozen=True)
class AgentStep:
    tool_call: ToolCall
    observation: str
    is_error: bool = False


@dataclass
class AgentResult:
    output: str
    history: ChatHistory
    intermediate_steps: tuple[AgentStep, ...] = field(default_factory=tuple)


def build_agent_prompt(system_prompt: str | None = None) -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", (system_prompt or DEFAULT_AGENT_SYSTEM_PROMPT).strip()),
            MessagesPlaceholder("chat_history", optional=True),
            ("human", "{input}"),
            MessagesPlaceholder("agent_scratchpad", optional=True),
        ]
    )


class AgentExecutor:
    """Lets the model choose between answering and calling tools, bounded by an iteration cap."""

    def __init__(
        self,
        model: ChatModel,
        tools: Sequence[Tool],
        *,
        prompt: ChatPromptTemplate | None = None,
        max_iterations: int | None = None,
    ) -> None:
        self._model = model
        self._toolbox = Toolbox(tools)
        self._prompt = prompt or build_agent_prompt()
        if max_iterations is None:
            max_iterations = Settings.from_env().max_iterations
        self._max_iterations = max_iterations
        if self._max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    def invoke(self, user_input: str, history: ChatHistory | None = None) -> AgentResult:
        """
        Run one user turn to completion.

        Args:
            user_input: The latest user message.
            history: Transcript of earlier turns. It is extended with this turn and returned.
        """
        history = history if history is not None else ChatHistory()
        scratchpad: list[ChatMessage] = []
        steps: list[AgentStep] = []
        specs = self._toolbox.specs() or None

        for iteration in range(1, self._max_iterations + 1):
            prompt_value = self._prompt.invoke(
                {"input": user_input, "chat_history": history.messages, "agent_scratchpad": scratchpad}
            )
            reply = self._model.invoke(prompt_value, tools=specs)

            if not reply.tool_calls:
                logger.debug("Agent finished after %d iteration(s)", iteration)
                history.add_user_message(user_input)
                history.add_ai_message(reply.content)
                return AgentResult(output=reply.content, history=history, intermediate_steps=tuple(steps))

            scratchpad.append(reply)
            for call in reply.tool_calls:
                step = self._dispatch(call)
                steps.append(step)
                scratchpad.append(ChatMessage(role="tool", content=step.observation, tool_call_id=call.id))

        logger.warning("Agent exhausted %d iterations without a final answer", self._max_iterations)
        raise AgentExhaustedError(self._max_iterations, steps)

    def _dispatch(self, call: ToolCall) -> AgentStep:
        logger.debug("Dispatching tool '%s'", call.name)
        try:
            tool = self._toolbox.get(call.name)
            observation = tool.run(call.arguments)
        except ToolNotFoundError as exc:
            return AgentStep(tool_call=call, observation=f"Error: {exc}", is_error=True)
        except ValidationError as exc:
            return AgentStep(tool_call=call, observation=f"Error: invalid arguments for '{call.name}': {exc}", is_error=True)
        except Exception as exc:  # tool failures are reported back to the model
            logger.info("Tool '%s' failed: %s", call.name, exc)
            return AgentStep(tool_call=call, observation=f"Error: {type(exc).__name__}: {exc}", is_error=True)
        return AgentStep(tool_call=call, observation=observation)


__all__ = [
    "Tool",
    "Toolbox",
    "QueryInput",
    "ToolNotFoundError",
    "AgentStep",
    "AgentResult",
    "AgentExecutor",
    "build_agent_prompt",
    "DEFAULT_AGENT_SYSTEM_PROMPT",
]
