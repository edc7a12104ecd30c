import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from chains.config import Settings
from chains.errors import ConfigurationError, ModelTimeoutError
from chains.llm import AzureOpenAIChatModel, OpenAIChatModel, build_chat_model_from_env
from chains.messages import ChatMessage, ToolCall
from chains.prompts import ChatPromptTemplate


class FakeCompletions:
    def __init__(self, replies, error: Exception | None = None):
        self.replies = list(replies)
        self.error = error
        self.requests: list[dict] = []

    def create(self, **request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(choices=[SimpleNamespace(message=self.replies.pop(0))])


def make_client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def provider_reply(content: str | None, tool_calls=None) -> SimpleNamespace:
    return SimpleNamespace(content=content, tool_calls=tool_calls)


def provider_tool_call(call_id: str, name: str, arguments: str) -> SimpleNamespace:
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def test_openai_chat_model_sends_rendered_prompt():
    completions = FakeCompletions([provider_reply("Woof!")])
    model = OpenAIChatModel("gpt-test", client=make_client(completions), settings=Settings(temperature=0.3))
    prompt = ChatPromptTemplate.from_messages([("system", "Be funny."), ("human", "{input}")])

    reply = prompt.pipe(model).invoke({"input": "dog"})

    assert reply == ChatMessage(role="assistant", content="Woof!")
    request = completions.requests[0]
    assert request["model"] == "gpt-test"
    assert request["temperature"] == 0.3
    assert request["messages"] == [
        {"role": "system", "content": "Be funny."},
        {"role": "user", "content": "dog"},
    ]
    assert "tools" not in request


def test_plain_string_is_sent_as_a_user_turn():
    completions = FakeCompletions([provider_reply("A poem.")])
    model = OpenAIChatModel(client=make_client(completions), settings=Settings())

    assert model.invoke("Write a poem about AI").content == "A poem."
    assert completions.requests[0]["messages"] == [{"role": "user", "content": "Write a poem about AI"}]
    assert completions.requests[0]["model"] == "gpt-4o-mini"


def test_tool_calls_are_decoded_and_round_tripped():
    completions = FakeCompletions(
        [
            provider_reply(None, [provider_tool_call("call_1", "lcel_search", '{"query": "LCEL"}')]),
            provider_reply("LCEL composes chains."),
        ]
    )
    model = OpenAIChatModel(client=make_client(completions), settings=Settings())
    tools = [{"type": "function", "function": {"name": "lcel_search", "parameters": {}}}]

    first = model.invoke("What is LCEL?", tools=tools)
    assert first.content == ""
    assert first.tool_calls == (ToolCall(id="call_1", name="lcel_search", arguments={"query": "LCEL"}),)

    model.invoke(
        [
            ChatMessage(role="user", content="What is LCEL?"),
            first,
            ChatMessage(role="tool", content="LCEL is ...", tool_call_id="call_1"),
        ],
        tools=tools,
    )

    sent = completions.requests[1]["messages"]
    assert completions.requests[0]["tools"] == tools
    assert sent[1]["tool_calls"][0]["function"] == {"name": "lcel_search", "arguments": json.dumps({"query": "LCEL"})}
    assert sent[2] == {"role": "tool", "content": "LCEL is ...", "tool_call_id": "call_1"}


def test_malformed_tool_arguments_become_empty():
    completions = FakeCompletions([provider_reply("", [provider_tool_call("c", "lcel_search", "{not json")])])
    model = OpenAIChatModel(client=make_client(completions), settings=Settings())

    assert model.invoke("hi").tool_calls[0].arguments == {}


def test_timeout_becomes_model_timeout_error():
    error = openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    model = OpenAIChatModel(client=make_client(FakeCompletions([], error)), settings=Settings(timeout=1.0))

    with pytest.raises(ModelTimeoutError):
        model.invoke("hello")


def test_missing_openai_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        OpenAIChatModel(settings=Settings(openai_api_key=None))


def test_incomplete_azure_configuration_is_rejected():
    with pytest.raises(ConfigurationError):
        AzureOpenAIChatModel(settings=Settings(provider="azure_openai", azure_api_key="key"))


def test_azure_model_uses_deployment_name():
    completions = FakeCompletions([provider_reply("ok")])
    model = AzureOpenAIChatModel("my-deployment", client=make_client(completions), settings=Settings())

    model.invoke("hi")

    assert completions.requests[0]["model"] == "my-deployment"


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        build_chat_model_from_env(Settings(provider="gemini"))


def test_factory_builds_openai_model_from_settings():
    model = build_chat_model_from_env(Settings(openai_api_key="sk-test", openai_model="gpt-x"))

    assert isinstance(model, OpenAIChatModel)
    assert model.model_name == "gpt-x"
