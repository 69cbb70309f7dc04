import pytest

from backends.anthropic_messages import AnthropicMessagesWire
from backends.gemini import GeminiWire
from backends.openai_chat import OpenAIChatWire
from config import ProviderRoute
from llm_gateway import LlmGatewayError

MESSAGES = [
    {"role": "system", "content": "Be kind."},
    {"role": "user", "content": "Why is the sky blue?"},
    {"role": "assistant", "content": "Scattering! What colour is sunset?"},
    {"role": "user", "content": "Orange"},
]


def _route(wire, **overrides):
    data = {"name": wire, "wire": wire, "base_url": "https://x.test/", "endpoint": "/v1/go", "model": "m"}
    data.update(overrides)
    return ProviderRoute(**data)


def test_openai_passes_messages_through():
    url, payload, headers = OpenAIChatWire().build_request(
        MESSAGES, cfg=_route("openai"), api_key=None, options={}
    )
    assert url == "https://x.test/v1/go"
    assert payload["messages"] == MESSAGES
    assert payload["max_tokens"] == 500
    assert "Authorization" not in headers


def test_anthropic_lifts_system_prompt():
    url, payload, headers = AnthropicMessagesWire().build_request(
        MESSAGES, cfg=_route("anthropic"), api_key="k", options={"max_tokens": 99}
    )
    assert payload["system"] == "Be kind."
    assert [m["role"] for m in payload["messages"]] == ["user", "assistant", "user"]
    assert payload["max_tokens"] == 99
    assert headers["x-api-key"] == "k"
    assert headers["anthropic-version"]


def test_anthropic_parse_sums_tokens():
    text, usage = AnthropicMessagesWire().parse_response(
        {"content": [{"type": "text", "text": "Hi "}, {"type": "text", "text": "there"}],
         "usage": {"input_tokens": 7, "output_tokens": 3}}
    )
    assert text == "Hi there"
    assert (usage.prompt_tokens, usage.completion_tokens, usage.total_tokens) == (7, 3, 10)
    with pytest.raises(LlmGatewayError):
        AnthropicMessagesWire().parse_response({"content": []})


def test_gemini_folds_system_into_first_user_turn():
    _, payload, headers = GeminiWire().build_request(
        MESSAGES, cfg=_route("gemini"), api_key="g", options={"temperature": 0.3, "max_tokens": 150}
    )
    contents = payload["contents"]
    assert [c["role"] for c in contents] == ["user", "model", "user"]
    assert contents[0]["parts"][0]["text"] == "Be kind."
    assert payload["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 150}
    assert headers["x-goog-api-key"] == "g"


def test_gemini_parse_without_usage_metadata():
    text, usage = GeminiWire().parse_response({"candidates": [{"content": {"parts": [{"text": "Blue!"}]}}]})
    assert text == "Blue!"
    assert usage is None
    with pytest.raises(LlmGatewayError):
        GeminiWire().parse_response({"candidates": []})


def test_openai_parse_usage():
    text, usage = OpenAIChatWire().parse_response(
        {"choices": [{"message": {"content": "4"}}], "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2}}
    )
    assert text == "4"
    assert usage.total_tokens == 2
