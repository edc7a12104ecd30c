"""Feeding one chain's output into a second chain."""

from __future__ import annotations

from chains.llm import ChatModel
from chains.parsers import StrOutputParser
from chains.pipeline import Lambda, Pipeline
from chains.prompts import ChatPromptTemplate

JOKE_PROMPT = """You are a comedian called Cody Mike.
Your goal is to tell a short but funny joke (1 joke per request) based on the topic provided by the user. No yapping.
User topic: {input}."""

CRITIQUE_PROMPT = """You are a joke evaluator called Jake Eval.
Your goals:
- Evaluate whether the provided joke is funny or not.
- Explain the joke.
- Suggest a joke that improves on the original joke.
Joke: {joke}."""


def build_joke_chain(model: ChatModel) -> Pipeline:
    return ChatPromptTemplate.from_template(JOKE_PROMPT).pipe(model, StrOutputParser())


def build_critique_chain(model: ChatModel) -> Pipeline:
    """``{"input": topic}`` -> joke -> critique of that joke."""
    joke_chain = build_joke_chain(model)
    return Pipeline(
        Lambda(lambda inputs: {"joke": joke_chain.invoke(inputs)}, name="tell_joke"),
        ChatPromptTemplate.from_template(CRITIQUE_PROMPT),
        model,
        StrOutputParser(),
    )
