"""Chunking: split long text into overlapping windows for size-limited consumers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from langchain_core.documents import Document as LangChainDocument
from langchain_text_splitters import RecursiveCharacterTextSplitter as LangChainRecursiveSplitter

from .models import Document

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS = ("\n\n", "\n", " ", "")


class TextSplitter(ABC):
    """Common contract: ``chunk_overlap`` must be smaller than ``chunk_size``."""

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must not be negative, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @abstractmethod
    def split_text(self, text: str) -> list[str]:
        """Return the chunks for ``text``."""

    def split_documents(self, documents: Iterable[Document]) -> list[Document]:
        chunks: list[Document] = []
        for document in documents:
            for piece in self.split_text(document.page_content):
                chunks.append(Document(page_content=piece, metadata=dict(document.metadata)))
        logger.debug("Split documents into %d chunk(s)", len(chunks))
        return chunks


class CharacterTextSplitter(TextSplitter):
    """Fixed windows of ``chunk_size`` characters, consecutive windows sharing ``chunk_overlap``.

    Every chunk except the last is exactly ``chunk_size`` long. Dropping the
    trailing ``chunk_overlap`` characters of every chunk but the last and
    concatenating the result gives back the source text.
    """

    def split_text(self, text: str) -> list[str]:  # noqa: D401
        return [text[start : start + self.chunk_size] for start in self._window_starts(len(text))]

    def split_documents(self, documents: Iterable[Document]) -> list[Document]:
        chunks: list[Document] = []
        for document in documents:
            text = document.page_content
            for start in self._window_starts(len(text)):
                metadata = {**document.metadata, "start_index": start}
                chunks.append(Document(page_content=text[start : start + self.chunk_size], metadata=metadata))
        logger.debug("Split documents into %d chunk(s)", len(chunks))
        return chunks

    def _window_starts(self, length: int) -> list[int]:
        if length == 0:
            return []
        step = self.chunk_size - self.chunk_overlap
        starts = [0]
        while starts[-1] + self.chunk_size < length:
            starts.append(starts[-1] + step)
        return starts


def join_chunks(chunks: Sequence[str], chunk_overlap: int) -> str:
    """Inverse of ``CharacterTextSplitter.split_text``."""
    if not chunks:
        return ""
    trimmed = [chunk[: len(chunk) - chunk_overlap] if chunk_overlap else chunk for chunk in chunks[:-1]]
    return "".join(trimmed) + chunks[-1]


class RecursiveCharacterTextSplitter(TextSplitter):
    """Separator-cascade chunking backed by ``langchain_text_splitters``.

    Splits on the coarsest separator present and recurses into pieces that are
    still too long. Separators stay attached to the start of the following
    chunk and chunks are whitespace-stripped. ``split_documents`` records the
    ``start_index`` of each chunk in its source.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Sequence[str] | None = None,
    ) -> None:
        super().__init__(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
        self._splitter = LangChainRecursiveSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=list(separators or DEFAULT_SEPARATORS),
            add_start_index=True,
            length_function=len,
        )

    def split_text(self, text: str) -> list[str]:  # noqa: D401
        return self._splitter.split_text(text)

    def split_documents(self, documents: Iterable[Document]) -> list[Document]:
        pieces = self._splitter.split_documents(
            [LangChainDocument(page_content=document.page_content, metadata=dict(document.metadata)) for document in documents]
        )
        chunks = [Document(page_content=piece.page_content, metadata=dict(piece.metadata)) for piece in pieces]
        logger.debug("Split documents into %d chunk(s)", len(chunks))
        return chunks


__all__ = [
    "TextSplitter",
    "CharacterTextSplitter",
    "RecursiveCharacterTextSplitter",
    "join_chunks",
    "DEFAULT_SEPARATORS",
]
