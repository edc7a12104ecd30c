"""Plain model calls and the first prompt templates."""

from __future__ import annotations

from chains.llm import ChatModel
from chains.messages import ChatMessage
from chains.parsers import StrOutputParser
from chains.prompts import ChatPromptTemplate

COMEDIAN_SYSTEM_PROMPT = (
    "You are an excellent comedian. Your jokes are short but meaningful.\n"
    "Tell a joke based on the following word provided by the user."
)

STUDENT_SCHEMA = """
CREATE TABLE dbo.Student(
  student_id varchar(10) primary key,
  first_name nvarchar(10),
  last_name nvarchar(10),
  city nvarchar(64),
  age int
)
""".strip()

SQL_PROMPT = """You are a MySQL expert.
Your goal is to generate syntax correct MySQL "SELECT" queries based on the given MySQL schemas.
You need to follow these rules and guidelines. No yapping.

Rules and Guidelines:
- DO:
  -- Select at least 3 and at most 5 columns.
  -- Always include the schema's primary key(s) in the "SELECT" list.
  -- Use 'JOIN' whenever tables need to be joined.
  -- Always add 'LIMIT 20'.
- DO NOT:
  -- Use '*' in "SELECT" queries.

Given the MySQL database schema: {schema}.
Generate a MySQL "SELECT" query for the following user input: {user_input}.
Display the following column(s): {column}."""


def ask(model: ChatModel, question: str = "Write a poem about AI") -> str:
    """Send one question straight to the model."""
    return model.invoke(question).content


def build_joke_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", COMEDIAN_SYSTEM_PROMPT),
            ("human", "{input}"),
        ]
    )


def tell_joke(model: ChatModel, topic: str = "dog") -> ChatMessage:
    """prompt -> model, returning the raw assistant message."""
    chain = build_joke_prompt().pipe(model)
    return chain.invoke({"input": topic})


def generate_select_query(
    model: ChatModel,
    user_input: str = "Find students who have age above 10",
    *,
    columns: str = "student_id, first_name, last_name, age",
    schema: str = STUDENT_SCHEMA,
) -> str:
    chain = ChatPromptTemplate.from_template(SQL_PROMPT).pipe(model, StrOutputParser())
    return chain.invoke({"schema": schema, "user_input": user_input, "column": columns})
