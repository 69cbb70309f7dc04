from __future__ import annotations

import threading

import pytest

from backends import GatewayBackend, create_backend
from backends.fallback import GENEROUS_FEEDBACK, NONSENSE_REDIRECT
from backends.gemini import GeminiWire
from backends.openai_chat import OpenAIChatWire
from config import AppConfig, EvaluationSettings, ProviderRoute
from conftest import FakeHttpClient, FakeResponse
from llm_gateway import LlmGatewayError, LlmUnavailableError


def _openai_route(**overrides):
    data = {"name": "openai", "wire": "openai", "base_url": "https://x.test", "endpoint": "/v1", "model": "m"}
    data.update(overrides)
    return ProviderRoute(**data)


def _gemini_route(**overrides):
    data = {
        "name": "gemini",
        "wire": "gemini",
        "base_url": "https://g.test",
        "endpoint": "/v1/models/x:generateContent",
        "model": "x",
        "fallback_on_unavailable": True,
    }
    data.update(overrides)
    return ProviderRoute(**data)


def _openai_ok(content, usage=None):
    payload = {"choices": [{"message": {"content": content}}]}
    if usage:
        payload["usage"] = usage
    return FakeResponse(200, payload)


def _backend(client, route=None, **kwargs):
    return GatewayBackend(route or _openai_route(), OpenAIChatWire(), client=client, sleep=lambda _: None, **kwargs)


def test_nonsense_short_circuits_without_network():
    client = FakeHttpClient()
    backend = _backend(client)
    result = backend.answer("asdfgh", "young")
    assert result.is_nonsense
    assert result.text == NONSENSE_REDIRECT
    assert result.usage.total_tokens == 0
    assert client.requests == []
    assert backend.usage_stats().conversation_count == 0


def test_answer_uses_length_budget_and_records_usage():
    client = FakeHttpClient(
        _openai_ok("Light scatters. What colour is sunset?", {"prompt_tokens": 100, "completion_tokens": 50, "total_tokens": 150})
    )
    backend = _backend(client)
    result = backend.answer("Why is the sky blue?", "young", is_first_turn=True)
    assert result.text.endswith("sunset?")
    assert client.requests[0]["json"]["max_tokens"] == 120
    stats = backend.usage_stats()
    assert stats.total_tokens == 150
    assert stats.conversation_count == 1
    assert stats.estimated_cost == pytest.approx(100 / 1000 * 0.0005 + 50 / 1000 * 0.0015)


def test_answer_states_the_real_age_when_known():
    client = FakeHttpClient(_openai_ok("Light scatters. What colour is sunset?"), _openai_ok("Light scatters. Why?"))
    backend = _backend(client)
    backend.answer("Why is the sky blue?", "young", age=7)
    backend.answer("Why is the sky blue?", "teen")
    with_age = client.requests[0]["json"]["messages"][-1]["content"]
    without_age = client.requests[1]["json"]["messages"][-1]["content"]
    assert with_age.startswith("The child is 7 years old.")
    assert "years old" not in without_age


def test_answer_failure_propagates():
    client = FakeHttpClient(FakeResponse(500, {}), FakeResponse(500, {}), FakeResponse(500, {}))
    with pytest.raises(LlmUnavailableError):
        _backend(client).answer("Why is the sky blue?", "teen")


def test_empty_answer_is_an_error():
    with pytest.raises(LlmGatewayError):
        _backend(FakeHttpClient(_openai_ok("   "))).answer("Why is the sky blue?", "teen")


def test_gemini_answers_offline_after_repeated_503():
    client = FakeHttpClient(FakeResponse(503, {}), FakeResponse(503, {}), FakeResponse(503, {}))
    backend = GatewayBackend(_gemini_route(), GeminiWire(), client=client, sleep=lambda _: None)
    result = backend.answer("So why is the sky blue?", "middle")
    assert result.is_fallback
    assert "scattering" in result.text
    assert result.text.endswith("What do you think about this explanation?")
    assert backend.usage_stats().total_tokens > 0


def test_fallback_only_applies_to_503():
    client = FakeHttpClient(FakeResponse(429, {}), FakeResponse(429, {}), FakeResponse(429, {}))
    backend = GatewayBackend(_gemini_route(), GeminiWire(), client=client, sleep=lambda _: None)
    with pytest.raises(LlmUnavailableError):
        backend.answer("Why is the sky blue?", "middle")


def test_evaluate_parses_verdict_without_counting_a_conversation():
    client = FakeHttpClient(_openai_ok('{"understood": false, "feedback": "Close!", "suggestion": "What do roots do?"}'))
    backend = _backend(client)
    evaluation = backend.evaluate("What do roots do?", "Roots drink. What do roots do?", "banana")
    assert evaluation.understood is False
    assert evaluation.suggestion == "What do roots do?"
    body = client.requests[0]["json"]
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 150
    stats = backend.usage_stats()
    assert stats.conversation_count == 0
    assert stats.total_tokens > 0


def test_evaluate_falls_back_on_garbage():
    client = FakeHttpClient(_openai_ok("yes"), _openai_ok("still no"), _openai_ok("nope"))
    evaluation = _backend(client).evaluate("Q?", "A. Q?", "reply")
    assert evaluation.understood is True
    assert evaluation.feedback == GENEROUS_FEEDBACK


def test_evaluate_falls_back_on_client_error():
    evaluation = _backend(FakeHttpClient(FakeResponse(401, {}))).evaluate("Q?", "A. Q?", "reply")
    assert evaluation.understood is True


def test_evaluate_deadline_wins():
    release = threading.Event()

    class SlowClient:
        def post(self, url, *, json, headers, timeout):
            release.wait(5)
            return _openai_ok('{"understood": false}')

    backend = GatewayBackend(
        _openai_route(),
        OpenAIChatWire(),
        evaluation=EvaluationSettings(deadline_s=0.1),
        client=SlowClient(),
        sleep=lambda _: None,
    )
    try:
        evaluation = backend.evaluate("Q?", "A. Q?", "reply")
    finally:
        release.set()
    assert evaluation.understood is True


def test_evaluate_attempts_are_bounded_by_the_deadline():
    client = FakeHttpClient(_openai_ok('{"understood": true, "feedback": "Yes."}'))
    backend = _backend(client, evaluation=EvaluationSettings(deadline_s=2.5))
    backend.evaluate("Q?", "A. Q?", "reply")
    assert client.requests[0]["timeout"] == 2.5


def test_answer_keeps_the_route_timeout():
    client = FakeHttpClient(_openai_ok("Light scatters. Why?"))
    _backend(client, route=_openai_route(timeout_s=12)).answer("Why is the sky blue?", "teen")
    assert client.requests[0]["timeout"] == 12


def test_test_connection_reports_success_and_failure():
    ok = _backend(FakeHttpClient(_openai_ok("4! What is 3+3?"))).test_connection()
    assert ok["success"] is True
    assert ok["answer"].startswith("4")
    bad = _backend(FakeHttpClient(FakeResponse(401, {}))).test_connection()
    assert bad["success"] is False
    assert "error" in bad


def test_create_backend_picks_wire_from_route():
    cfg = AppConfig(
        provider="gemini",
        providers={"openai": _openai_route(), "gemini": _gemini_route()},
    )
    backend = create_backend(cfg)
    assert backend.name == "gemini"
    assert isinstance(backend.wire, GeminiWire)
    assert isinstance(create_backend(cfg, "openai").wire, OpenAIChatWire)
