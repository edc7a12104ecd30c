"""Convenience exports for retrieval tooling."""

from .embeddings import AzureOpenAIEmbeddings, Embeddings, HashingEmbeddings, OpenAIEmbeddings, build_embeddings_from_env
from .loaders import TextFileLoader, WebPageLoader
from .models import Document, ScoredDocument, format_documents
from .qa import HistoryAwareRetriever, RetrievalChain, StuffDocumentsChain
from .retriever import Retriever, StaticRetriever, VectorStoreRetriever, create_retriever_tool
from .splitter import CharacterTextSplitter, RecursiveCharacterTextSplitter, TextSplitter
from .vectorstore import InMemoryVectorStore

__all__ = [
    "Document",
    "ScoredDocument",
    "format_documents",
    "Embeddings",
    "OpenAIEmbeddings",
    "AzureOpenAIEmbeddings",
    "HashingEmbeddings",
    "build_embeddings_from_env",
    "TextFileLoader",
    "WebPageLoader",
    "TextSplitter",
    "CharacterTextSplitter",
    "RecursiveCharacterTextSplitter",
    "InMemoryVectorStore",
    "Retriever",
    "VectorStoreRetriever",
    "StaticRetriever",
    "create_retriever_tool",
    "StuffDocumentsChain",
    "RetrievalChain",
    "HistoryAwareRetriever",
]
