import json

import pytest

from lessons import DEFAULT_LESSON_REGISTRY, LessonNotFoundError, LessonRegistry


def test_default_registry_lists_every_lesson():
    names = [lesson.name for lesson in DEFAULT_LESSON_REGISTRY.lessons()]

    assert names[0] == "ask"
    assert {"joke", "sql", "recipe", "rag-index", "rag-history", "memory-buffer", "critique"} <= set(names)
    assert DEFAULT_LESSON_REGISTRY.categories() == {"basics", "formatting", "retrieval", "memory", "composition"}


def test_every_default_runner_resolves():
    for lesson in DEFAULT_LESSON_REGISTRY.lessons():
        assert callable(lesson.resolve()), lesson.name


def test_unknown_lesson_raises_not_found():
    with pytest.raises(LessonNotFoundError):
        DEFAULT_LESSON_REGISTRY.get("lesson-99")


def test_registry_rejects_duplicate_names():
    registry = LessonRegistry()
    registry.register(name="ask", category="basics", description="d", runner="lessons.runners:ask")

    with pytest.raises(ValueError):
        registry.register(name="ask", category="basics", description="d", runner="lessons.runners:ask")


def test_registry_loads_from_json_file(tmp_path):
    path = tmp_path / "lessons.json"
    path.write_text(
        json.dumps([{"name": "echo", "category": "custom", "description": "Echo", "runner": "json:dumps"}]),
        encoding="utf-8",
    )

    registry = LessonRegistry.from_json(str(path))

    assert registry.get("echo").resolve() is json.dumps


def test_malformed_runner_is_rejected():
    registry = LessonRegistry()
    lesson = registry.register(name="bad", category="custom", description="d", runner="no_colon")

    with pytest.raises(ValueError):
        lesson.resolve()
