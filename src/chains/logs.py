"""Logging setup for the CLI entry points."""

from __future__ import annotations

import logging
import sys

_NOISY_LOGGERS = ("openai", "httpx", "httpcore", "urllib3")


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stderr handler on the root logger.

    Safe to call more than once; existing handlers are replaced so repeated
    calls do not duplicate output.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)
    root_logger.setLevel(level if isinstance(level, int) else level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
