"""Entry points that bind each lesson to models built from the environment."""

from __future__ import annotations

from typing import Any

from chains.config import Settings
from chains.llm import ChatModel, build_chat_model_from_env
from chains.memory import ChatHistory
from knowledge.embeddings import Embeddings, build_embeddings_from_env
from knowledge.loaders import WebPageLoader
from knowledge.vectorstore import InMemoryVectorStore

from . import basics, conversation, critique, formatting, knowledge_base


class LessonContext:
    """Lazily builds the collaborators a lesson needs, so offline lessons never ask for credentials."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        source_url: str = knowledge_base.DEFAULT_SOURCE_URL,
        model: ChatModel | None = None,
        embeddings: Embeddings | None = None,
        loader: Any | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.source_url = source_url
        self._model = model
        self._embeddings = embeddings
        self._loader = loader
        self._store: InMemoryVectorStore | None = None

    @property
    def model(self) -> ChatModel:
        if self._model is None:
            self._model = build_chat_model_from_env(self.settings)
        return self._model

    @property
    def embeddings(self) -> Embeddings:
        if self._embeddings is None:
            self._embeddings = build_embeddings_from_env(self.settings)
        return self._embeddings

    @property
    def loader(self) -> Any:
        if self._loader is None:
            self._loader = WebPageLoader(self.source_url, timeout=self.settings.timeout)
        return self._loader

    def store(self) -> InMemoryVectorStore:
        """Index of the source page, built on first use and reused afterwards."""
        if self._store is None:
            self._store = knowledge_base.build_index(self.loader.load(), self.embeddings)
        return self._store


def ask(context: LessonContext, user_input: str | None) -> str:
    return basics.ask(context.model, user_input or "Write a poem about AI")


def joke(context: LessonContext, user_input: str | None) -> str:
    return basics.tell_joke(context.model, user_input or "dog").content


def sql(context: LessonContext, user_input: str | None) -> str:
    return basics.generate_select_query(context.model, user_input or "Find students who have age above 10")


def joke_text(context: LessonContext, user_input: str | None) -> str:
    return formatting.joke_as_text(context.model, user_input or "dog")


def synonyms(context: LessonContext, user_input: str | None) -> list[str]:
    return formatting.synonyms_as_list(context.model, user_input or "happy")


def person(context: LessonContext, user_input: str | None) -> dict[str, Any]:
    if user_input:
        return formatting.extract_person(context.model, user_input)
    return formatting.extract_person(context.model)


def recipe(context: LessonContext, user_input: str | None) -> dict[str, Any]:
    result = formatting.extract_recipe(context.model, user_input) if user_input else formatting.extract_recipe(context.model)
    return result.model_dump()


def rag_bare(context: LessonContext, user_input: str | None) -> str:
    return knowledge_base.answer_without_context(context.model, user_input or "What is LCEL?")


def rag_static(context: LessonContext, user_input: str | None) -> str:
    return knowledge_base.answer_with_documents(context.model, user_input or "What is the passphrase?")


def rag_page(context: LessonContext, user_input: str | None) -> str:
    return knowledge_base.answer_from_page(context.model, user_input or "What is LCEL?", context.loader)


def rag_index(context: LessonContext, user_input: str | None) -> str:
    result = knowledge_base.answer_from_index(context.model, context.store(), user_input or "What is LCEL?")
    return result["answer"]


def rag_history(context: LessonContext, user_input: str | None) -> str:
    history = ChatHistory()
    history.add_user_message("Hello")
    history.add_ai_message("Hi, how can I help you?")
    history.add_user_message("What is LCEL?")
    history.add_ai_message("LCEL stands for LangChain Expression Language")
    chain = knowledge_base.build_conversational_retrieval_chain(context.model, context.store())
    result = chain.invoke({"input": user_input or "What is it?", "chat_history": history})
    return result["answer"]


def memory_buffer(context: LessonContext, user_input: str | None) -> list[str]:
    turns = (user_input,) if user_input else conversation.DEFAULT_TURNS
    return conversation.remember_with_buffer(context.model, turns)


def memory_pipeline(context: LessonContext, user_input: str | None) -> list[str]:
    turns = (user_input,) if user_input else conversation.DEFAULT_TURNS
    return conversation.remember_with_pipeline(context.model, turns)


def critique_joke(context: LessonContext, user_input: str | None) -> str:
    return critique.build_critique_chain(context.model).invoke({"input": user_input or "bears"})
