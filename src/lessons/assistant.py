"""Tool-using assistant that can search an indexed web page."""

from __future__ import annotations

from chains.agent import AgentExecutor, build_agent_prompt
from chains.llm import ChatModel
from knowledge.retriever import create_retriever_tool
from knowledge.vectorstore import InMemoryVectorStore

ASSISTANT_SYSTEM_PROMPT = """You are a helpful assistant called Max.

Your goal is to answer the user's question and assist with the user's needs. No yapping."""

SEARCH_TOOL_NAME = "lcel_search"
SEARCH_TOOL_DESCRIPTION = (
    "Use this tool when searching for information about LangChain Expression Language (LCEL). "
    "For any questions about LangChain Expression Language (LCEL), you must use this tool!"
)


def build_assistant(
    model: ChatModel,
    store: InMemoryVectorStore,
    *,
    k: int = 2,
    tool_name: str = SEARCH_TOOL_NAME,
    tool_description: str = SEARCH_TOOL_DESCRIPTION,
    max_iterations: int | None = None,
) -> AgentExecutor:
    search_tool = create_retriever_tool(store.as_retriever(k=k), tool_name, tool_description)
    return AgentExecutor(
        model,
        [search_tool],
        prompt=build_agent_prompt(ASSISTANT_SYSTEM_PROMPT),
        max_iterations=max_iterations,
    )
