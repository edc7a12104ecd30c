"""Error hierarchy shared by the pipeline, retrieval and agent modules."""

from __future__ import annotations

from typing import Any, Sequence


class ConfigurationError(EnvironmentError):
    """Raised when a credential or setting is missing or malformed."""


class CollaboratorError(RuntimeError):
    """Raised when an external collaborator (model, loader, parser input) fails."""


class ModelTimeoutError(CollaboratorError):
    """Raised when a model provider call exceeds its timeout."""


class DocumentLoadError(CollaboratorError):
    """Raised when a document source cannot be read."""


class DocumentTimeoutError(DocumentLoadError):
    """Raised when a document source does not respond within its timeout."""


class SchemaViolationError(CollaboratorError):
    """Raised when model output does not match the expected shape."""

    def __init__(self, message: str, violations: Sequence[str] = ()) -> None:
        self.violations = list(violations)
        if self.violations:
            message = f"{message}: " + "; ".join(self.violations)
        super().__init__(message)


class AgentExhaustedError(CollaboratorError):
    """Raised when the agent loop hits its iteration cap without a final answer."""

    def __init__(self, max_iterations: int, intermediate_steps: Sequence[Any] = ()) -> None:
        self.max_iterations = max_iterations
        self.intermediate_steps = tuple(intermediate_steps)
        super().__init__(f"Agent stopped after {max_iterations} iterations without a final answer")


class LogicError(ValueError):
    """Programmer error: the call itself is malformed."""


class MissingVariableError(LogicError):
    """Raised when a template placeholder has no value."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__("Missing value for template variable(s): " + ", ".join(self.missing))


class EmptyIndexError(LogicError):
    """Raised when querying a similarity index that holds no vectors."""


__all__ = [
    "ConfigurationError",
    "CollaboratorError",
    "ModelTimeoutError",
    "DocumentLoadError",
    "DocumentTimeoutError",
    "SchemaViolationError",
    "AgentExhaustedError",
    "LogicError",
    "MissingVariableError",
    "EmptyIndexError",
]
