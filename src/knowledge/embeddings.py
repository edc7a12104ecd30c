"""Embedding clients that turn text into vectors."""

from __future__ import annotations

import hashlib
import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any, Sequence

import openai
from openai import AzureOpenAI, OpenAI

from chains.config import Settings
from chains.errors import ModelTimeoutError

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"\w+", re.UNICODE)


class Embeddings(ABC):
    """Interface for embedding backends."""

    @abstractmethod
    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed a batch of texts, preserving order."""

    def embed_query(self, text: str) -> list[float]:
        return self.embed_documents([text])[0]


class _EmbeddingsEndpoint(Embeddings):
    """Shared request path for OpenAI-compatible embedding endpoints."""

    def __init__(self, client: Any, model: str, *, batch_size: int, timeout: float) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._client = client
        self._model = model
        self._batch_size = batch_size
        self._timeout = timeout

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:  # noqa: D401
        vectors: list[list[float]] = []
        for offset in range(0, len(texts), self._batch_size):
            batch = list(texts[offset : offset + self._batch_size])
            logger.debug("Embedding %d text(s) with %s", len(batch), self._model)
            try:
                response = self._client.embeddings.create(model=self._model, input=batch, timeout=self._timeout)
            except openai.APITimeoutError as exc:
                raise ModelTimeoutError(f"{self._model} did not respond within {self._timeout} seconds") from exc
            ordered = sorted(response.data, key=lambda item: item.index)
            vectors.extend(list(item.embedding) for item in ordered)
        return vectors


class OpenAIEmbeddings(_EmbeddingsEndpoint):
    """Embeddings from the OpenAI API."""

    def __init__(
        self,
        model: str | None = None,
        *,
        batch_size: int = 256,
        client: OpenAI | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings.from_env()
        if client is None:
            client = OpenAI(api_key=settings.require_openai_key())
        super().__init__(client, model or settings.embedding_model, batch_size=batch_size, timeout=settings.timeout)


class AzureOpenAIEmbeddings(_EmbeddingsEndpoint):
    """Embeddings from an Azure OpenAI deployment."""

    def __init__(
        self,
        deployment: str | None = None,
        *,
        batch_size: int = 16,
        client: AzureOpenAI | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings.from_env()
        deployment = deployment or settings.azure_embedding_deployment
        if client is None:
            api_key, endpoint, deployment = settings.require_azure(deployment)
            client = AzureOpenAI(api_key=api_key, azure_endpoint=endpoint, api_version=settings.azure_api_version)
        if not deployment:
            raise ValueError("An Azure OpenAI embedding deployment name is required")
        super().__init__(client, deployment, batch_size=batch_size, timeout=settings.timeout)


class HashingEmbeddings(Embeddings):
    """Deterministic bag-of-words embeddings useful for tests and offline runs.

    Each lower-cased word token is hashed into one of ``dimensions`` buckets and
    the resulting count vector is L2-normalised. Texts sharing words end up
    close together; no network access is needed.
    """

    def __init__(self, dimensions: int = 256) -> None:
        if dimensions < 1:
            raise ValueError("dimensions must be at least 1")
        self._dimensions = dimensions

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:  # noqa: D401
        return [self._embed(text) for text in texts]

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        for token in _TOKEN.findall(text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            vector[int.from_bytes(digest[:8], "big") % self._dimensions] += 1.0
        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0:
            return vector
        return [value / norm for value in vector]


def build_embeddings_from_env(settings: Settings | None = None) -> Embeddings:
    settings = settings or Settings.from_env()

    if settings.provider == "openai":
        return OpenAIEmbeddings(settings=settings)
    if settings.provider == "azure_openai":
        return AzureOpenAIEmbeddings(settings=settings)

    raise ValueError("Unsupported LLM_PROVIDER. Expected one of: openai, azure_openai.")


__all__ = [
    "Embeddings",
    "OpenAIEmbeddings",
    "AzureOpenAIEmbeddings",
    "HashingEmbeddings",
    "build_embeddings_from_env",
]
