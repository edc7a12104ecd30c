"""Output decoders for raw model text."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from pydantic import BaseModel, Field, ValidationError, create_model

from .errors import SchemaViolationError
from .messages import ChatMessage
from .pipeline import Runnable

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _message_text(value: Any) -> str:
    if isinstance(value, ChatMessage):
        return value.content
    if isinstance(value, str):
        return value
    raise TypeError(f"Output parsers expect a string or ChatMessage, got {type(value).__name__}")


class OutputParser(Runnable):
    """Base class: ``invoke`` accepts a model message or plain text."""

    def parse(self, text: str) -> Any:
        raise NotImplementedError

    def get_format_instructions(self) -> str:
        return ""

    def invoke(self, value: Any) -> Any:  # noqa: D401
        return self.parse(_message_text(value))


class StrOutputParser(OutputParser):
    """Return the model text unchanged."""

    def parse(self, text: str) -> str:  # noqa: D401
        return text


class CommaSeparatedListOutputParser(OutputParser):
    """Split a comma separated answer into a list of trimmed items."""

    def parse(self, text: str) -> list[str]:  # noqa: D401
        return [item.strip() for item in text.strip().split(",") if item.strip()]

    def get_format_instructions(self) -> str:
        return (
            "Your response should be a list of comma separated values, "
            "eg: `foo, bar, baz` or `foo,bar,baz`"
        )


def _extract_json_block(text: str) -> str:
    fenced = _FENCED_JSON.search(text)
    if fenced:
        return fenced.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start : end + 1]
    return text.strip()


def _describe_validation_error(exc: ValidationError) -> list[str]:
    violations: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        violations.append(f"{location}: {error.get('msg', 'invalid value')}")
    return violations


class StructuredOutputParser(OutputParser):
    """Validate JSON model output against a pydantic schema."""

    def __init__(self, model: type[BaseModel], *, as_dict: bool = False) -> None:
        self._model = model
        self._as_dict = as_dict

    @classmethod
    def from_model(cls, model: type[BaseModel]) -> "StructuredOutputParser":
        return cls(model)

    @classmethod
    def from_names_and_descriptions(cls, fields: Mapping[str, str]) -> "StructuredOutputParser":
        """Build a flat schema of optional string fields; ``parse`` then returns a dict."""
        if not fields:
            raise ValueError("At least one field is required")
        definitions: dict[str, Any] = {
            name: (str | None, Field(default=None, description=description)) for name, description in fields.items()
        }
        model = create_model("StructuredOutput", **definitions)
        return cls(model, as_dict=True)

    def get_format_instructions(self) -> str:
        schema = json.dumps(self._model.model_json_schema(), ensure_ascii=False)
        return (
            "Respond only with a JSON object that conforms to the JSON schema below. "
            "Wrap it in a ```json code block and do not add commentary.\n"
            f"```json\n{schema}\n```"
        )

    def parse(self, text: str) -> Any:  # noqa: D401
        payload = _extract_json_block(text)
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise SchemaViolationError("Model output is not valid JSON", [str(exc)]) from exc

        try:
            result = self._model.model_validate(data)
        except ValidationError as exc:
            raise SchemaViolationError(
                f"Model output does not match {self._model.__name__}",
                _describe_validation_error(exc),
            ) from exc
        return result.model_dump() if self._as_dict else result


__all__ = [
    "OutputParser",
    "StrOutputParser",
    "CommaSeparatedListOutputParser",
    "StructuredOutputParser",
]
