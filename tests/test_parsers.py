import pytest
from pydantic import BaseModel

from chains.errors import SchemaViolationError
from chains.messages import ai_message
from chains.parsers import CommaSeparatedListOutputParser, StrOutputParser, StructuredOutputParser


class Person(BaseModel):
    name: str
    age: int


def test_str_parser_returns_message_content():
    assert StrOutputParser().invoke(ai_message("Why did the dog sit?")) == "Why did the dog sit?"


def test_comma_parser_trims_and_drops_empty_items():
    parser = CommaSeparatedListOutputParser()

    assert parser.invoke(" joyful, cheerful ,content,, glad , ") == ["joyful", "cheerful", "content", "glad"]
    assert "comma separated" in parser.get_format_instructions()


def test_structured_parser_reads_fenced_json():
    parser = StructuredOutputParser.from_model(Person)
    text = 'Here you go:\n```json\n{"name": "Felix", "age": 32}\n```'

    person = parser.parse(text)

    assert person == Person(name="Felix", age=32)


def test_structured_parser_reads_bare_json_object():
    parser = StructuredOutputParser.from_model(Person)

    assert parser.parse('Sure! {"name": "Ada", "age": 36} Anything else?').name == "Ada"


def test_structured_parser_reports_every_violated_field():
    parser = StructuredOutputParser.from_model(Person)

    with pytest.raises(SchemaViolationError) as excinfo:
        parser.parse('{"age": "old"}')

    fields = " ".join(excinfo.value.violations)
    assert len(excinfo.value.violations) == 2
    assert "name" in fields
    assert "age" in fields


def test_structured_parser_rejects_non_json():
    parser = StructuredOutputParser.from_model(Person)

    with pytest.raises(SchemaViolationError) as excinfo:
        parser.parse("I could not find a person in that phrase.")

    assert "not valid JSON" in str(excinfo.value)


def test_named_fields_parser_returns_dict_with_nulls():
    parser = StructuredOutputParser.from_names_and_descriptions(
        {"name": "the name of the person", "occupation": "the occupation of the person"}
    )

    result = parser.invoke(ai_message('```json\n{"name": "Felix", "occupation": null}\n```'))

    assert result == {"name": "Felix", "occupation": None}
    assert "the occupation of the person" in parser.get_format_instructions()


def test_parsers_reject_other_input_types():
    with pytest.raises(TypeError):
        StrOutputParser().invoke({"content": "hi"})
