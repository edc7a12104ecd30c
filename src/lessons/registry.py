"""Lesson registry and metadata primitives."""

from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import import_module, resources
from typing import Any, Callable, Iterable, Sequence


class LessonNotFoundError(KeyError):
    """Raised when a lesson name is not registered."""


@dataclass(frozen=True)
class Lesson:
    """Describe one runnable lesson."""

    name: str
    category: str
    description: str
    runner: str

    def resolve(self) -> Callable[..., Any]:
        """Import the ``module:function`` runner."""
        module_name, _, attribute = self.runner.partition(":")
        if not module_name or not attribute:
            raise ValueError(f"Lesson '{self.name}' has a malformed runner '{self.runner}'")
        return getattr(import_module(module_name), attribute)


class LessonRegistry:
    """Registry that stores lessons and allows user extensions."""

    def __init__(self, lessons: Iterable[Lesson] | None = None) -> None:
        self._lessons: dict[str, Lesson] = {}
        for lesson in lessons or []:
            self._add(lesson)

    def register(self, *, name: str, category: str, description: str, runner: str) -> Lesson:
        lesson = Lesson(name=name, category=category, description=description, runner=runner)
        self._add(lesson)
        return lesson

    def _add(self, lesson: Lesson) -> None:
        if lesson.name in self._lessons:
            raise ValueError(f"Lesson '{lesson.name}' is already registered")
        self._lessons[lesson.name] = lesson

    def lessons(self) -> Sequence[Lesson]:
        return tuple(self._lessons.values())

    def categories(self) -> set[str]:
        return {lesson.category for lesson in self._lessons.values()}

    def get(self, name: str) -> Lesson:
        try:
            return self._lessons[name]
        except KeyError as exc:
            raise LessonNotFoundError(f"Unknown lesson '{name}'") from exc

    @classmethod
    def with_default_lessons(cls) -> "LessonRegistry":
        """Load registry defaults from the packaged JSON resource."""

        return cls._from_resource("default_lessons.json")

    @classmethod
    def from_json(cls, path: str) -> "LessonRegistry":
        """Create a registry from a JSON file on disk."""

        with open(path, "r", encoding="utf-8") as handle:
            entries = json.load(handle)
        return cls._from_entries(entries)

    @classmethod
    def _from_resource(cls, resource_name: str) -> "LessonRegistry":
        try:
            data = resources.files(__package__).joinpath(resource_name).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Cannot locate registry resource '{resource_name}'") from exc
        return cls._from_entries(json.loads(data))

    @classmethod
    def _from_entries(cls, entries: Iterable[dict[str, str]]) -> "LessonRegistry":
        registry = cls()
        for entry in entries:
            registry.register(
                name=entry["name"],
                category=entry["category"],
                description=entry["description"],
                runner=entry["runner"],
            )
        return registry


DEFAULT_LESSON_REGISTRY = LessonRegistry.with_default_lessons()

__all__ = ["Lesson", "LessonRegistry", "LessonNotFoundError", "DEFAULT_LESSON_REGISTRY"]
