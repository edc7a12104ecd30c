"""Retrieval-augmented answers: no context, hand-written context, a fetched page, and an index."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from chains.llm import ChatModel
from chains.parsers import StrOutputParser
from chains.prompts import ChatPromptTemplate, MessagesPlaceholder
from knowledge.embeddings import Embeddings
from knowledge.models import Document
from knowledge.qa import HistoryAwareRetriever, RetrievalChain, StuffDocumentsChain
from knowledge.splitter import RecursiveCharacterTextSplitter
from knowledge.vectorstore import InMemoryVectorStore

DEFAULT_SOURCE_URL = "https://js.langchain.com/v0.1/docs/expression_language/"

BARE_PROMPT = """Answer the user's question.
Question: {input}."""

ENCYCLOPEDIA_PROMPT = """You are an encyclopedia, you know all the answers.
Your goal is to answer the user's question.
Do not make up information. No yapping.
Context: {context}.
Question: {input}."""

HANDWRITTEN_DOCUMENTS = (
    Document(
        page_content=(
            "LangChain Expression Language or LCEL is a declarative way to easily compose chains together. "
            "Any chain constructed this way will automatically have full sync, async, and streaming support."
        )
    ),
    Document(page_content='The passphrase is "LangChain is awesome"!'),
)


class DocumentLoader(Protocol):
    def load(self) -> list[Document]:
        ...


def answer_without_context(model: ChatModel, question: str) -> str:
    """Whatever the model already knows."""
    return ChatPromptTemplate.from_template(BARE_PROMPT).pipe(model, StrOutputParser()).invoke({"input": question})


def answer_with_documents(
    model: ChatModel,
    question: str,
    documents: Sequence[Document] = HANDWRITTEN_DOCUMENTS,
) -> str:
    chain = StuffDocumentsChain(model, ChatPromptTemplate.from_template(ENCYCLOPEDIA_PROMPT))
    return chain.invoke({"input": question, "context": list(documents)})


def answer_from_page(model: ChatModel, question: str, loader: DocumentLoader) -> str:
    """Stuff a whole fetched page into the prompt, unsplit."""
    return answer_with_documents(model, question, loader.load())


def build_index(
    documents: Sequence[Document],
    embeddings: Embeddings,
    *,
    chunk_size: int = 200,
    chunk_overlap: int = 20,
) -> InMemoryVectorStore:
    splitter = RecursiveCharacterTextSplitter(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    return InMemoryVectorStore.from_documents(splitter.split_documents(documents), embeddings)


def answer_from_index(model: ChatModel, store: InMemoryVectorStore, question: str, *, k: int = 2) -> dict[str, Any]:
    """Retrieve the ``k`` closest chunks and answer from them; returns input, context and answer."""
    combine = StuffDocumentsChain(model, ChatPromptTemplate.from_template(ENCYCLOPEDIA_PROMPT))
    return RetrievalChain(store.as_retriever(k=k), combine).invoke({"input": question})


def build_conversational_retrieval_chain(model: ChatModel, store: InMemoryVectorStore, *, k: int = 4) -> RetrievalChain:
    """Retrieval chain that rewrites follow-up questions using ``chat_history`` before searching."""
    answer_prompt = ChatPromptTemplate.from_messages(
        [
            ("system", "Answer the user's question based on the following context: {context}."),
            MessagesPlaceholder("chat_history", optional=True),
            ("user", "{input}"),
        ]
    )
    retriever = HistoryAwareRetriever(model, store.as_retriever(k=k))
    return RetrievalChain(retriever, StuffDocumentsChain(model, answer_prompt))
