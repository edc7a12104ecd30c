#!/usr/bin/env python3
"""Chat with the tool-using assistant over standard input."""

from __future__ import annotations

import argparse
import logging
from typing import Callable

from openai import OpenAIError

from chains.agent import AgentExecutor
from chains.config import Settings
from chains.errors import CollaboratorError, ConfigurationError
from chains.llm import build_chat_model_from_env
from chains.logs import configure_logging
from chains.memory import ChatHistory
from knowledge.embeddings import build_embeddings_from_env
from knowledge.loaders import WebPageLoader
from lessons.assistant import build_assistant
from lessons.knowledge_base import DEFAULT_SOURCE_URL, build_index

logger = logging.getLogger("chat_ui")


def run_agent_chat(
    agent: AgentExecutor,
    *,
    history: ChatHistory | None = None,
    read_line: Callable[[str], str] = input,
    write_line: Callable[[str], None] = print,
) -> ChatHistory:
    """Read one user line, print one agent line, repeat until end of input."""
    history = history if history is not None else ChatHistory()

    while True:
        try:
            user_input = read_line("User: ").strip()
        except (EOFError, KeyboardInterrupt):
            write_line("\nExiting chat.")
            break

        if not user_input:
            continue

        try:
            result = agent.invoke(user_input, history)
        except (CollaboratorError, OpenAIError) as exc:
            logger.error("Request aborted: %s", exc)
            write_line(f"Agent: Sorry, that request failed ({exc}).")
            continue

        history = result.history
        write_line(f"Agent: {result.output}")

    return history


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with an assistant that can search an indexed web page.")
    parser.add_argument("--url", default=DEFAULT_SOURCE_URL, help="Page to index (default: %(default)s).")
    parser.add_argument("--k", type=int, default=2, help="Chunks returned per search (default: %(default)s).")
    parser.add_argument("--chunk-size", type=int, default=200, help="Characters per chunk (default: %(default)s).")
    parser.add_argument("--chunk-overlap", type=int, default=20, help="Overlap between chunks (default: %(default)s).")
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Cap on model calls per request (default: AGENT_MAX_ITERATIONS or 10).",
    )
    args = parser.parse_args()

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        model = build_chat_model_from_env(settings)
        embeddings = build_embeddings_from_env(settings)
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    try:
        documents = WebPageLoader(args.url, timeout=settings.timeout).load()
        store = build_index(documents, embeddings, chunk_size=args.chunk_size, chunk_overlap=args.chunk_overlap)
    except (CollaboratorError, OpenAIError) as exc:
        logger.error("Could not build the knowledge index: %s", exc)
        raise SystemExit(1) from exc

    agent = build_assistant(model, store, k=args.k, max_iterations=args.max_iterations)
    print(f"Indexed {len(store)} chunk(s) from {args.url}. Press Ctrl-D to leave.\n")  # noqa: T201
    run_agent_chat(agent)


if __name__ == "__main__":
    main()
