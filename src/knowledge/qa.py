"""Question answering over documents: stuff, retrieve, and history-aware retrieve."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from chains.errors import MissingVariableError
from chains.parsers import OutputParser, StrOutputParser
from chains.pipeline import Lambda, Pipeline, Runnable
from chains.prompts import ChatPromptTemplate, MessagesPlaceholder, PromptTemplate

from .models import Document, format_documents
from .retriever import Retriever, query_from_input

logger = logging.getLogger(__name__)

DEFAULT_REPHRASE_INSTRUCTION = (
    "Given the above conversation, generate a search query to look up in order to get "
    "information relevant to the conversation"
)


def build_rephrase_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            MessagesPlaceholder("chat_history"),
            ("user", "{input}"),
            ("user", DEFAULT_REPHRASE_INSTRUCTION),
        ]
    )


def _require(values: Mapping[str, Any], *names: str) -> None:
    missing = [name for name in names if name not in values]
    if missing:
        raise MissingVariableError(missing)


class StuffDocumentsChain(Runnable):
    """Format every document into one prompt variable, then prompt -> model -> parser."""

    def __init__(
        self,
        model: Runnable,
        prompt: PromptTemplate | ChatPromptTemplate,
        parser: OutputParser | None = None,
        *,
        document_variable: str = "context",
        document_separator: str = "\n\n",
    ) -> None:
        if document_variable not in prompt.input_variables:
            raise ValueError(f"Prompt must declare the '{document_variable}' variable")
        self._document_variable = document_variable
        self._separator = document_separator
        self._pipeline = Pipeline(Lambda(self._stuff, name="stuff_documents"), prompt, model, parser or StrOutputParser())

    def _stuff(self, values: Mapping[str, Any]) -> dict[str, Any]:
        _require(values, self._document_variable)
        documents: list[Document] = list(values[self._document_variable])
        return {**values, self._document_variable: format_documents(documents, self._separator)}

    def invoke(self, value: Any) -> Any:  # noqa: D401
        if not isinstance(value, Mapping):
            raise TypeError("StuffDocumentsChain expects a mapping of prompt variables")
        return self._pipeline.invoke(value)


class HistoryAwareRetriever(Runnable):
    """Rewrite the latest question into a standalone search query when there is history."""

    def __init__(
        self,
        model: Runnable,
        retriever: Retriever,
        rephrase_prompt: ChatPromptTemplate | None = None,
    ) -> None:
        prompt = rephrase_prompt or build_rephrase_prompt()
        if "input" not in prompt.input_variables:
            raise ValueError("The rephrase prompt must declare the 'input' variable")
        self._retriever = retriever
        self._rephrase = Pipeline(prompt, model, StrOutputParser())

    def invoke(self, value: Any) -> list[Document]:  # noqa: D401
        if not isinstance(value, Mapping) or not value.get("chat_history"):
            return self._retriever.retrieve(query_from_input(value))
        _require(value, "input")
        query = self._rephrase.invoke(value).strip()
        logger.debug("Rephrased retrieval query: %s", query)
        return self._retriever.retrieve(query or str(value["input"]))


class RetrievalChain(Runnable):
    """Retrieve documents for ``input`` and hand them to a combine-documents chain as ``context``."""

    def __init__(self, retriever: Runnable, combine_chain: Runnable) -> None:
        self._retriever = retriever
        self._combine = combine_chain

    def invoke(self, value: Any) -> dict[str, Any]:  # noqa: D401
        inputs = dict(value) if isinstance(value, Mapping) else {"input": value}
        _require(inputs, "input")
        documents = self._retriever.invoke(inputs)
        answer = self._combine.invoke({**inputs, "context": documents})
        return {**inputs, "context": documents, "answer": answer}


__all__ = [
    "StuffDocumentsChain",
    "HistoryAwareRetriever",
    "RetrievalChain",
    "build_rephrase_prompt",
    "DEFAULT_REPHRASE_INSTRUCTION",
]
