from typing import Any, Mapping, Sequence

import pytest

from chains.agent import Tool
from chains.errors import MissingVariableError
from chains.llm import ChatModel
from chains.memory import ChatHistory
from chains.messages import ChatMessage, ai_message
from chains.pipeline import Lambda
from chains.prompts import ChatPromptTemplate, MessagesPlaceholder
from knowledge.embeddings import HashingEmbeddings
from knowledge.models import Document
from knowledge.qa import HistoryAwareRetriever, RetrievalChain, StuffDocumentsChain
from knowledge.retriever import StaticRetriever, create_retriever_tool
from knowledge.vectorstore import InMemoryVectorStore


class RecordingModel(ChatModel):
    def __init__(self, replies: Sequence[str]):
        self.replies = list(replies)
        self.calls: list[list[ChatMessage]] = []

    def generate(
        self,
        messages: Sequence[ChatMessage],
        *,
        tools: Sequence[Mapping[str, Any]] | None = None,
    ) -> ChatMessage:
        self.calls.append(list(messages))
        return ai_message(self.replies.pop(0))


class RecordingRetriever(StaticRetriever):
    def __init__(self, documents):
        super().__init__(documents)
        self.queries: list[str] = []

    def retrieve(self, query: str):
        self.queries.append(query)
        return super().retrieve(query)


DOCUMENTS = [
    Document("LCEL is a declarative way to compose chains."),
    Document('The passphrase is "LangChain is awesome"!'),
]


def test_stuff_chain_joins_documents_into_context():
    model = RecordingModel(["LangChain is awesome"])
    chain = StuffDocumentsChain(model, ChatPromptTemplate.from_template("Context: {context}.\nQuestion: {input}."))

    answer = chain.invoke({"input": "What is the passphrase?", "context": DOCUMENTS})

    assert answer == "LangChain is awesome"
    assert model.calls[0][0].content == (
        "Context: LCEL is a declarative way to compose chains.\n\n"
        'The passphrase is "LangChain is awesome"!.\n'
        "Question: What is the passphrase?."
    )


def test_stuff_chain_requires_context_variable():
    with pytest.raises(ValueError):
        StuffDocumentsChain(RecordingModel([]), ChatPromptTemplate.from_template("{input}"))


def test_retrieval_chain_returns_input_context_and_answer():
    retriever = RecordingRetriever(DOCUMENTS[1:])
    combine = StuffDocumentsChain(RecordingModel(["LangChain is awesome"]), ChatPromptTemplate.from_template("{context} {input}"))

    result = RetrievalChain(retriever, combine).invoke({"input": "passphrase?"})

    assert result == {"input": "passphrase?", "context": DOCUMENTS[1:], "answer": "LangChain is awesome"}
    assert retriever.queries == ["passphrase?"]


def test_retrieval_chain_requires_input():
    chain = RetrievalChain(StaticRetriever([]), Lambda(lambda values: "unused"))

    with pytest.raises(MissingVariableError):
        chain.invoke({"question": "what?"})


def test_history_aware_retriever_uses_raw_input_without_history():
    model = RecordingModel([])
    retriever = RecordingRetriever(DOCUMENTS)

    HistoryAwareRetriever(model, retriever).invoke({"input": "What is LCEL?", "chat_history": ChatHistory()})

    assert retriever.queries == ["What is LCEL?"]
    assert model.calls == []


def test_history_aware_retriever_rephrases_follow_ups():
    model = RecordingModel(["LangChain Expression Language definition"])
    retriever = RecordingRetriever(DOCUMENTS)
    history = ChatHistory.from_messages([("user", "What is LCEL?"), ("assistant", "LangChain Expression Language")])

    HistoryAwareRetriever(model, retriever).invoke({"input": "What is it?", "chat_history": history})

    assert retriever.queries == ["LangChain Expression Language definition"]
    sent = model.calls[0]
    assert [message.content for message in sent[:3]] == ["What is LCEL?", "LangChain Expression Language", "What is it?"]
    assert "search query" in sent[-1].content


def test_conversational_retrieval_over_an_index():
    store = InMemoryVectorStore(HashingEmbeddings())
    store.add_documents(DOCUMENTS)
    model = RecordingModel(["What is the passphrase", "It is LangChain is awesome."])
    answer_prompt = ChatPromptTemplate.from_messages(
        [
            ("system", "Answer based on: {context}"),
            MessagesPlaceholder("chat_history", optional=True),
            ("user", "{input}"),
        ]
    )
    chain = RetrievalChain(HistoryAwareRetriever(model, store.as_retriever(k=1)), StuffDocumentsChain(model, answer_prompt))
    history = ChatHistory.from_messages([("user", "Is there a secret?"), ("assistant", "Yes, a passphrase.")])

    result = chain.invoke({"input": "What is it?", "chat_history": history})

    assert result["answer"] == "It is LangChain is awesome."
    assert result["context"] == [DOCUMENTS[1]]
    assert "passphrase" in model.calls[1][0].content


def test_retriever_tool_formats_documents():
    tool = create_retriever_tool(StaticRetriever(DOCUMENTS), "lcel_search", "Search LCEL docs")

    assert isinstance(tool, Tool)
    assert tool.run({"query": "anything"}) == "\n\n".join(document.page_content for document in DOCUMENTS)
    assert create_retriever_tool(StaticRetriever([]), "empty", "Nothing").run({"query": "x"}) == "No relevant documents found."
