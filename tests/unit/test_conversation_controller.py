from __future__ import annotations

import random

from agents import question_bank as bank
from agents.conversation import DEFAULT_RETRY_PROMPT, ConversationController
from agents.types import AnswerResult, Evaluation, TokenUsage
from backends import GatewayBackend
from backends.fallback import GENEROUS_FEEDBACK
from backends.openai_chat import OpenAIChatWire
from config import ProviderRoute
from conftest import FakeBackend, FakeHttpClient, FakeResponse
from llm_gateway import LlmUnavailableError

ANSWER = "Roots soak up water like straws. What do you think leaves do?"


class Profiles:
    def __init__(self, age=7, interests=None, fail=False):
        self.age = age
        self.interests = interests or []
        self.fail = fail

    def get_child_profile(self):
        if self.fail:
            raise RuntimeError("db locked")
        return {"age": self.age, "gender": None}

    def get_selected_interests(self):
        return self.interests


def _controller(backend, profiles=None, **kwargs):
    return ConversationController(backend, profiles or Profiles(), rng=random.Random(0), **kwargs)


def test_nonsense_stays_in_question_without_backend_call():
    backend = FakeBackend()
    controller = _controller(backend)
    result = controller.handle("asdf")
    assert result.stage == "question"
    assert not result.unlock and not result.error
    assert "Try something like" in result.message
    assert backend.answer_calls == []


def test_question_moves_to_understanding():
    backend = FakeBackend(answers=[ANSWER])
    controller = _controller(backend, Profiles(age=7, interests=["Dogs"]))
    result = controller.handle("How do plants drink?")
    assert result.stage == "understanding"
    assert result.message == ANSWER
    assert result.usage.total_tokens == 10
    call = backend.answer_calls[0]
    assert call["age_band"] == "young"
    assert call["is_first_turn"] is True
    assert call["interests"] == ["Dogs"]
    state = controller.state
    assert state.pending_question == "How do plants drink?"
    assert state.pending_answer == ANSWER


def test_understood_reply_unlocks():
    backend = FakeBackend(answers=[ANSWER], evaluations=[Evaluation(understood=True, feedback="Great idea!")])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    result = controller.handle("they make food from sunlight")
    assert result.unlock is True
    assert result.stage == "complete"
    assert result.message.startswith("Great idea!")
    assert backend.evaluate_calls[0]["follow_up_question"] == "What do you think leaves do?"
    assert controller.state.pending_answer is None


def test_not_understood_retries_with_suggestion_order():
    backend = FakeBackend(
        answers=[ANSWER],
        evaluations=[
            Evaluation(understood=False, feedback="Hmm!", suggestion="What colour are leaves?"),
            Evaluation(understood=False, feedback="Close!"),
        ],
    )
    controller = _controller(backend, recommender=lambda reply: None)
    controller.handle("How do plants drink?")
    first = controller.handle("banana")
    assert first.retry is True
    assert first.stage == "understanding"
    assert first.message == "Hmm! What colour are leaves?"
    second = controller.handle("banana again")
    assert second.message == f"Close! {DEFAULT_RETRY_PROMPT}"


def test_recommender_fills_missing_suggestion():
    backend = FakeBackend(answers=[ANSWER], evaluations=[Evaluation(understood=False, feedback="Almost.")])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    result = controller.handle("green")
    assert result.message == "Almost. Can you tell me more about what you're thinking?"


def test_topic_switch_is_a_fresh_first_turn():
    backend = FakeBackend(answers=[ANSWER, "Bees dance. Why do you think they dance?"])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    history = [{"user": "How do plants drink?", "ai": ANSWER}]
    result = controller.handle("What do bees eat?", history=history)
    assert result.stage == "understanding"
    assert backend.evaluate_calls == []
    second = backend.answer_calls[1]
    assert second["is_first_turn"] is True
    assert second["turn_index"] == 1
    assert controller.state.pending_question == "What do bees eat?"


def test_question_marked_reply_without_interrogative_is_evaluated():
    backend = FakeBackend(answers=[ANSWER])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    result = controller.handle("do they make food?")
    assert result.unlock is True
    assert len(backend.evaluate_calls) == 1


def test_answer_failure_resets_with_connection_message():
    backend = FakeBackend(answers=[LlmUnavailableError("down", status=503)])
    controller = _controller(backend)
    result = controller.handle("How do plants drink?")
    assert result.error is True
    assert result.stage == "question"
    assert "trouble connecting" in result.message
    assert controller.state.stage == "question"


def test_unexpected_failure_resets_with_apology():
    backend = FakeBackend(answers=[ANSWER, RuntimeError("boom")])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    result = controller.handle("Why is the sky blue?")
    assert result.error is True
    assert result.stage == "question"
    assert controller.state.pending_answer is None


def test_complete_is_terminal_until_reset():
    backend = FakeBackend(answers=[ANSWER, ANSWER])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    controller.handle("leaves catch light")
    result = controller.handle("How do fish breathe?")
    assert result.stage == "complete"
    assert result.unlock is False
    assert len(backend.answer_calls) == 1
    controller.reset()
    assert controller.handle("How do fish breathe?").stage == "understanding"


def test_understanding_without_pending_answer_acts_as_question():
    backend = FakeBackend(answers=[ANSWER])
    controller = _controller(backend)
    result = controller.handle("How do plants drink?", stage="understanding")
    assert result.stage == "understanding"
    assert backend.evaluate_calls == []


def test_backend_nonsense_flag_redirects():
    backend = FakeBackend(answers=[AnswerResult(text="nope", usage=TokenUsage(), is_nonsense=True)])
    result = _controller(backend).handle("Why zzz?")
    assert result.stage == "question"
    assert "Try something like" in result.message


def test_profile_failures_fall_back_to_defaults():
    backend = FakeBackend(answers=[ANSWER])
    controller = _controller(backend, Profiles(fail=True, interests=["Cats"]))
    controller.handle("How do plants drink?")
    call = backend.answer_calls[0]
    assert call["age_band"] == "teen"
    assert call["interests"] == ["Cats"]


def test_example_questions_follow_profile():
    controller = _controller(FakeBackend(), Profiles(age=7, interests=["Dogs"]))
    questions = controller.example_questions(3)
    assert len(questions) == 3
    assert "If you could ask dogs one question, what would it be?" in questions


def test_evaluation_crash_still_unlocks():
    backend = FakeBackend(answers=[ANSWER], evaluations=[RuntimeError("judge down")])
    controller = _controller(backend)
    controller.handle("How do plants drink?")
    result = controller.handle("they catch light")
    assert result.unlock is True
    assert result.stage == "complete"
    assert result.error is False
    assert GENEROUS_FEEDBACK.split("!")[0] in result.message
    assert controller.state.stage == "complete"


def test_provider_down_on_every_evaluation_attempt_still_unlocks():
    route = ProviderRoute(name="openai", wire="openai", base_url="https://x.test", endpoint="/v1", model="m")
    client = FakeHttpClient(
        FakeResponse(200, {"choices": [{"message": {"content": ANSWER}}]}),
        FakeResponse(503, {}),
        FakeResponse(503, {}),
        FakeResponse(503, {}),
    )
    backend = GatewayBackend(route, OpenAIChatWire(), client=client, sleep=lambda _: None)
    controller = _controller(backend)
    assert controller.handle("How do plants drink?").stage == "understanding"
    result = controller.handle("they catch light")
    assert result.unlock is True
    assert result.stage == "complete"
    assert len(client.requests) == 4


def test_nonsense_redirect_offers_band_starter_questions():
    result = _controller(FakeBackend(), Profiles(age=7)).handle("asdf")
    offered = [q for q in bank.EXAMPLE_QUESTIONS["young"] if q in result.message]
    assert len(offered) == 3


def test_real_age_reaches_the_backend():
    backend = FakeBackend(answers=[ANSWER, ANSWER])
    _controller(backend, Profiles(age=11)).handle("How do plants drink?")
    _controller(backend, Profiles(age=None)).handle("How do plants drink?")
    assert backend.answer_calls[0]["age"] == 11
    assert backend.answer_calls[1]["age"] is None


def test_fractional_age_is_truncated():
    backend = FakeBackend(answers=[ANSWER])
    _controller(backend, Profiles(age="7.5")).handle("How do plants drink?")
    assert backend.answer_calls[0]["age_band"] == "young"
    assert backend.answer_calls[0]["age"] == 7
