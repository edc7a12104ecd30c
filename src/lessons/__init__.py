"""Escalating lessons: plain call, templates, parsers, retrieval, memory, agents."""

from .registry import DEFAULT_LESSON_REGISTRY, Lesson, LessonNotFoundError, LessonRegistry
from .runners import LessonContext

__all__ = [
    "DEFAULT_LESSON_REGISTRY",
    "Lesson",
    "LessonNotFoundError",
    "LessonRegistry",
    "LessonContext",
]
