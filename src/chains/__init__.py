"""Prompt -> model -> parser composition, memory and tool-calling agents."""

from .agent import AgentExecutor, AgentResult, AgentStep, Tool, ToolNotFoundError, build_agent_prompt
from .config import Settings
from .errors import (
    AgentExhaustedError,
    CollaboratorError,
    ConfigurationError,
    DocumentLoadError,
    DocumentTimeoutError,
    EmptyIndexError,
    LogicError,
    MissingVariableError,
    ModelTimeoutError,
    SchemaViolationError,
)
from .llm import AzureOpenAIChatModel, ChatModel, OpenAIChatModel, build_chat_model_from_env
from .memory import ChatHistory, ConversationBufferMemory, ConversationChain
from .messages import ChatMessage, ToolCall, ai_message, system_message, user_message
from .parsers import CommaSeparatedListOutputParser, OutputParser, StrOutputParser, StructuredOutputParser
from .pipeline import Lambda, Parallel, Pipeline, Runnable
from .prompts import ChatPromptTemplate, MessagesPlaceholder, PromptTemplate, PromptValue

__all__ = [
    "AgentExecutor",
    "AgentResult",
    "AgentStep",
    "Tool",
    "ToolNotFoundError",
    "build_agent_prompt",
    "Settings",
    "AgentExhaustedError",
    "CollaboratorError",
    "ConfigurationError",
    "DocumentLoadError",
    "DocumentTimeoutError",
    "EmptyIndexError",
    "LogicError",
    "MissingVariableError",
    "ModelTimeoutError",
    "SchemaViolationError",
    "ChatModel",
    "OpenAIChatModel",
    "AzureOpenAIChatModel",
    "build_chat_model_from_env",
    "ChatHistory",
    "ConversationBufferMemory",
    "ConversationChain",
    "ChatMessage",
    "ToolCall",
    "ai_message",
    "system_message",
    "user_message",
    "OutputParser",
    "StrOutputParser",
    "CommaSeparatedListOutputParser",
    "StructuredOutputParser",
    "Runnable",
    "Lambda",
    "Parallel",
    "Pipeline",
    "ChatPromptTemplate",
    "MessagesPlaceholder",
    "PromptTemplate",
    "PromptValue",
]
__version__ = "0.1.0"
