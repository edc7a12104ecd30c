"""In-memory similarity index over embedded chunks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence
from uuid import uuid4

import numpy as np

from chains.errors import EmptyIndexError

from .embeddings import Embeddings
from .models import Document, ScoredDocument
from .retriever import VectorStoreRetriever

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddedChunk:
    """A document chunk paired with its vector."""

    id: str
    document: Document
    vector: np.ndarray


def cosine_similarities(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against each row; zero-length vectors score 0."""
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = np.linalg.norm(query)
    denominator = row_norms * query_norm
    dots = matrix @ query
    return np.divide(dots, denominator, out=np.zeros_like(dots, dtype=float), where=denominator != 0)


class InMemoryVectorStore:
    """Unordered, append-only collection of embedded chunks for the process lifetime.

    Nothing is deduplicated, persisted or evicted.
    """

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings
        self._chunks: list[EmbeddedChunk] = []

    @classmethod
    def from_documents(cls, documents: Sequence[Document], embeddings: Embeddings) -> "InMemoryVectorStore":
        store = cls(embeddings)
        store.add_documents(documents)
        return store

    @property
    def embeddings(self) -> Embeddings:
        return self._embeddings

    def __len__(self) -> int:
        return len(self._chunks)

    def add_documents(self, documents: Sequence[Document]) -> list[str]:
        documents = list(documents)
        if not documents:
            return []
        vectors = self._embeddings.embed_documents([document.page_content for document in documents])
        if len(vectors) != len(documents):
            raise RuntimeError(f"Embeddings returned {len(vectors)} vector(s) for {len(documents)} document(s)")
        return [self.add_embedded(document, vector) for document, vector in zip(documents, vectors)]

    def add_texts(self, texts: Iterable[str], metadatas: Sequence[dict] | None = None) -> list[str]:
        texts = list(texts)
        metadatas = list(metadatas) if metadatas is not None else [{} for _ in texts]
        if len(metadatas) != len(texts):
            raise ValueError("metadatas must match texts one-to-one")
        return self.add_documents(
            [Document(page_content=text, metadata=dict(metadata)) for text, metadata in zip(texts, metadatas)]
        )

    def add_embedded(self, document: Document, vector: Sequence[float]) -> str:
        array = np.asarray(vector, dtype=float)
        if array.ndim != 1:
            raise ValueError("Vectors must be one-dimensional")
        if self._chunks and array.shape != self._chunks[0].vector.shape:
            raise ValueError(
                f"Vector dimension {array.shape[0]} does not match index dimension {self._chunks[0].vector.shape[0]}"
            )
        chunk_id = str(uuid4())
        self._chunks.append(EmbeddedChunk(id=chunk_id, document=document, vector=array))
        logger.debug("Index now holds %d chunk(s)", len(self._chunks))
        return chunk_id

    def similarity_search_with_score_by_vector(self, vector: Sequence[float], k: int = 4) -> list[ScoredDocument]:
        """Top ``k`` chunks by cosine similarity, highest first; ties keep insertion order."""
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        if not self._chunks:
            raise EmptyIndexError("The similarity index holds no chunks")

        query = np.asarray(vector, dtype=float)
        matrix = np.vstack([chunk.vector for chunk in self._chunks])
        if query.shape != (matrix.shape[1],):
            raise ValueError(f"Query dimension {query.shape} does not match index dimension {matrix.shape[1]}")

        scores = cosine_similarities(matrix, query)
        order = np.argsort(-scores, kind="stable")[:k]
        return [ScoredDocument(document=self._chunks[index].document, score=float(scores[index])) for index in order]

    def similarity_search_by_vector(self, vector: Sequence[float], k: int = 4) -> list[Document]:
        return [scored.document for scored in self.similarity_search_with_score_by_vector(vector, k)]

    def similarity_search_with_score(self, query: str, k: int = 4) -> list[ScoredDocument]:
        if not self._chunks:
            raise EmptyIndexError("The similarity index holds no chunks")
        return self.similarity_search_with_score_by_vector(self._embeddings.embed_query(query), k)

    def similarity_search(self, query: str, k: int = 4) -> list[Document]:
        return [scored.document for scored in self.similarity_search_with_score(query, k)]

    def as_retriever(self, k: int = 4) -> VectorStoreRetriever:
        return VectorStoreRetriever(self, k=k)


__all__ = ["InMemoryVectorStore", "EmbeddedChunk", "cosine_similarities"]
