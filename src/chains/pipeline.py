"""Explicit stage composition: prompt -> model -> parser and friends."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping, Union

logger = logging.getLogger(__name__)


class Runnable(ABC):
    """A single pipeline stage."""

    @abstractmethod
    def invoke(self, value: Any) -> Any:
        """Transform one input into one output."""

    def batch(self, values: Iterable[Any]) -> list[Any]:
        """Invoke sequentially for each value; the first failure aborts the batch."""
        return [self.invoke(value) for value in values]

    def pipe(self, *others: "StageLike") -> "Pipeline":
        """Return a pipeline that feeds this stage's output into ``others``."""
        return Pipeline(self, *others)

    @property
    def name(self) -> str:
        return type(self).__name__


StageLike = Union[Runnable, Callable[[Any], Any], Mapping[str, Any]]


def coerce_runnable(stage: StageLike) -> Runnable:
    """Turn callables into ``Lambda`` stages and mappings into ``Parallel`` stages."""
    if isinstance(stage, Runnable):
        return stage
    if isinstance(stage, Mapping):
        return Parallel(stage)
    if callable(stage):
        return Lambda(stage)
    raise TypeError(f"Cannot use {type(stage).__name__} as a pipeline stage")


class Lambda(Runnable):
    """Wrap a plain function as a stage."""

    def __init__(self, func: Callable[[Any], Any], *, name: str | None = None) -> None:
        self._func = func
        self._name = name or getattr(func, "__name__", "lambda")

    @property
    def name(self) -> str:
        return self._name

    def invoke(self, value: Any) -> Any:  # noqa: D401
        return self._func(value)


class Parallel(Runnable):
    """Feed the same input to several branches and collect their outputs by key."""

    def __init__(self, branches: Mapping[str, StageLike]) -> None:
        if not branches:
            raise ValueError("Parallel requires at least one branch")
        self._branches = {key: coerce_runnable(branch) for key, branch in branches.items()}

    def invoke(self, value: Any) -> dict[str, Any]:  # noqa: D401
        return {key: branch.invoke(value) for key, branch in self._branches.items()}


class Pipeline(Runnable):
    """Ordered sequence of stages; each output becomes the next input."""

    def __init__(self, *stages: StageLike) -> None:
        if not stages:
            raise ValueError("A pipeline needs at least one stage")
        flattened: list[Runnable] = []
        for stage in stages:
            runnable = coerce_runnable(stage)
            if isinstance(runnable, Pipeline):
                flattened.extend(runnable.stages)
            else:
                flattened.append(runnable)
        self._stages = tuple(flattened)

    @property
    def stages(self) -> tuple[Runnable, ...]:
        return self._stages

    def pipe(self, *others: StageLike) -> "Pipeline":
        return Pipeline(*self._stages, *others)

    def invoke(self, value: Any) -> Any:  # noqa: D401
        current = value
        for index, stage in enumerate(self._stages):
            logger.debug("Running stage %d/%d: %s", index + 1, len(self._stages), stage.name)
            current = stage.invoke(current)
        return current


__all__ = ["Runnable", "Lambda", "Parallel", "Pipeline", "coerce_runnable", "StageLike"]
