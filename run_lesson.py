#!/usr/bin/env python3
"""CLI helper to run one lesson and print its result."""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Callable, Sequence

from openai import OpenAIError

from chains.config import Settings
from chains.errors import CollaboratorError, ConfigurationError
from chains.logs import configure_logging
from lessons import DEFAULT_LESSON_REGISTRY, LessonContext, LessonNotFoundError, LessonRegistry
from lessons.knowledge_base import DEFAULT_SOURCE_URL

logger = logging.getLogger("run_lesson")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one prompt, parser, retrieval or memory lesson.")
    parser.add_argument("lesson", nargs="?", help="Lesson name (use --list to see them)")
    parser.add_argument(
        "--input",
        dest="user_input",
        default=None,
        help="Text passed to the lesson instead of its built-in example.",
    )
    parser.add_argument(
        "--url",
        default=DEFAULT_SOURCE_URL,
        help="Page used by the retrieval lessons (default: %(default)s)",
    )
    parser.add_argument("--list", action="store_true", help="List the available lessons and exit.")
    return parser.parse_args(argv)


def render_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


def main(
    argv: Sequence[str] | None = None,
    *,
    registry: LessonRegistry = DEFAULT_LESSON_REGISTRY,
    context_factory: Callable[..., LessonContext] = LessonContext,
) -> int:
    args = parse_args(argv)
    try:
        settings = Settings.from_env()
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc
    configure_logging(settings.log_level)

    if args.list or not args.lesson:
        for lesson in registry.lessons():
            print(f"{lesson.name:<16} [{lesson.category}] {lesson.description}")  # noqa: T201
        return 0

    try:
        lesson = registry.get(args.lesson)
    except LessonNotFoundError as exc:
        raise SystemExit(f"Unknown lesson '{args.lesson}'. Use --list to see the available lessons.") from exc

    context = context_factory(settings, source_url=args.url)
    try:
        result = lesson.resolve()(context, args.user_input)
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc
    except (CollaboratorError, OpenAIError) as exc:
        logger.error("Lesson '%s' aborted: %s", lesson.name, exc)
        return 1

    print(render_result(result))  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
