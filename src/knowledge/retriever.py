"""Retriever implementations for RAG pipelines."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from chains.agent import QueryInput, Tool
from chains.errors import MissingVariableError
from chains.pipeline import Runnable

from .models import Document, format_documents

if TYPE_CHECKING:
    from .vectorstore import InMemoryVectorStore


def query_from_input(value: Any) -> str:
    """Retrievers accept the raw query or a chain input mapping carrying ``input``."""
    if isinstance(value, Mapping):
        if "input" not in value:
            raise MissingVariableError(["input"])
        return str(value["input"])
    if isinstance(value, str):
        return value
    raise TypeError(f"Cannot use {type(value).__name__} as a retrieval query")


class Retriever(Runnable):
    """Abstract retriever contract."""

    @abstractmethod
    def retrieve(self, query: str) -> list[Document]:
        """Return the most relevant documents for a query."""

    def invoke(self, value: Any) -> list[Document]:  # noqa: D401
        return self.retrieve(query_from_input(value))


class VectorStoreRetriever(Retriever):
    """Top-k similarity lookups against an in-memory index."""

    def __init__(self, store: "InMemoryVectorStore", k: int = 4) -> None:
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        self._store = store
        self._k = k

    @property
    def k(self) -> int:
        return self._k

    def retrieve(self, query: str) -> list[Document]:  # noqa: D401
        return self._store.similarity_search(query, k=self._k)


class StaticRetriever(Retriever):
    """Always returns the same documents; handy for hand-written knowledge."""

    def __init__(self, documents: Iterable[Document]) -> None:
        self._documents = list(documents)

    def retrieve(self, query: str) -> list[Document]:  # noqa: D401
        return list(self._documents)


def create_retriever_tool(retriever: Retriever, name: str, description: str) -> Tool:
    """Expose a retriever to an agent as a ``query``-taking tool."""

    def search(query: str) -> str:
        documents = retriever.retrieve(query)
        if not documents:
            return "No relevant documents found."
        return format_documents(documents)

    return Tool(name=name, description=description, func=search, args_schema=QueryInput)


__all__ = [
    "Retriever",
    "VectorStoreRetriever",
    "StaticRetriever",
    "create_retriever_tool",
    "query_from_input",
]
