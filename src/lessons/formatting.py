"""Decoding model output: plain text, lists and schema-validated objects."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from chains.llm import ChatModel
from chains.parsers import CommaSeparatedListOutputParser, StrOutputParser, StructuredOutputParser
from chains.prompts import ChatPromptTemplate

from .basics import COMEDIAN_SYSTEM_PROMPT

EXTRACTION_PROMPT = """You are an information extracting expert. Your goal is to extract information correctly.

Extract information from the following phrase.
If there is no information about a property, use null. DO NOT make up information. No yapping.

Formatting instruction: {format_instruction}
Phrase: {phrase}"""

PERSON_FIELDS = {
    "name": "the name of the person",
    "age": "the age of the person",
    "gender": "the gender of the person",
    "occupation": "the occupation of the person",
}


class Ingredient(BaseModel):
    ingredient: str = Field(description="ingredient name")
    amount: float = Field(description="ingredient amount")
    measure: str | None = Field(default=None, description="ingredient measurement")
    factory: str | None = Field(default=None, description="ingredient producer")


class Recipe(BaseModel):
    recipe: str = Field(description="the recipe name")
    ingredients: list[Ingredient] = Field(description="the ingredients and their amounts")


def joke_as_text(model: ChatModel, word: str = "dog") -> str:
    prompt = ChatPromptTemplate.from_messages([("system", COMEDIAN_SYSTEM_PROMPT), ("human", "{input}")])
    return prompt.pipe(model, StrOutputParser()).invoke({"input": word})


def synonyms_as_list(model: ChatModel, word: str = "happy") -> list[str]:
    parser = CommaSeparatedListOutputParser()
    prompt = ChatPromptTemplate.from_messages(
        [
            (
                "system",
                "You are a dictionary. Provide 5 synonyms for the word provided by the user.\n"
                "{format_instruction}",
            ),
            ("human", "{word}"),
        ]
    ).partial(format_instruction=parser.get_format_instructions())
    return prompt.pipe(model, parser).invoke({"word": word})


def _extract(model: ChatModel, parser: StructuredOutputParser, phrase: str) -> Any:
    chain = ChatPromptTemplate.from_template(EXTRACTION_PROMPT).pipe(model, parser)
    return chain.invoke({"phrase": phrase, "format_instruction": parser.get_format_instructions()})


def extract_person(
    model: ChatModel,
    phrase: str = (
        "A 32 year-old male Youtuber from Sweden called Felix celebrating his channel "
        "reaching 100 million subscribers"
    ),
) -> dict[str, Any]:
    return _extract(model, StructuredOutputParser.from_names_and_descriptions(PERSON_FIELDS), phrase)


def extract_recipe(
    model: ChatModel,
    phrase: str = "You will need 100 grams flour from Norway, 200 litres water and 50 grams yeast to make bread.",
) -> Recipe:
    return _extract(model, StructuredOutputParser.from_model(Recipe), phrase)
