"""Shared data structures for retrieval."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    """A span of source text plus optional metadata."""

    page_content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredDocument:
    """A document returned from a similarity lookup."""

    document: Document
    score: float


def format_documents(documents: list[Document] | tuple[Document, ...], separator: str = "\n\n") -> str:
    return separator.join(document.page_content for document in documents)
