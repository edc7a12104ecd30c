"""Conversational memory, once through ``ConversationChain`` and once as an explicit pipeline."""

from __future__ import annotations

from typing import Iterable

from chains.llm import ChatModel
from chains.memory import ConversationBufferMemory, ConversationChain
from chains.parsers import StrOutputParser
from chains.pipeline import Parallel, Pipeline
from chains.prompts import ChatPromptTemplate

MEMORY_PROMPT = """You are a helpful assistant called MaxZap.
Your goal is to help answering user question.
History: {history}
User question: {input}."""

DEFAULT_TURNS = (
    "Remember, the passphrase is WORLD DOMINATION",
    "What is the passphrase?",
)


def remember_with_buffer(
    model: ChatModel,
    turns: Iterable[str] = DEFAULT_TURNS,
    memory: ConversationBufferMemory | None = None,
) -> list[str]:
    memory = memory or ConversationBufferMemory(memory_key="history")
    chain = ConversationChain(model, ChatPromptTemplate.from_template(MEMORY_PROMPT), memory)
    return [chain.invoke({"input": turn}) for turn in turns]


def remember_with_pipeline(
    model: ChatModel,
    turns: Iterable[str] = DEFAULT_TURNS,
    memory: ConversationBufferMemory | None = None,
) -> list[str]:
    """Same as ``remember_with_buffer`` but the memory lookup is a visible pipeline stage."""
    memory = memory or ConversationBufferMemory(memory_key="history")
    chain = Pipeline(
        Parallel(
            {
                "input": lambda inputs: inputs["input"],
                "history": lambda _: memory.load_memory_variables()["history"],
            }
        ),
        ChatPromptTemplate.from_template(MEMORY_PROMPT),
        model,
        StrOutputParser(),
    )

    answers: list[str] = []
    for turn in turns:
        inputs = {"input": turn}
        answer = chain.invoke(inputs)
        memory.save_context(inputs, {"output": answer})
        answers.append(answer)
    return answers
