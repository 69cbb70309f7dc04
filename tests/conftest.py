import os
import sys
import tempfile
from pathlib import Path

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agents.types import AnswerResult, Evaluation, TokenUsage, UsageStats
from config.settings import settings
from storage.migrate import migrate
from storage.settings_store import SettingsStore


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture
def store(tmp_db):
    return SettingsStore(tmp_db)


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    @property
    def text(self):
        return str(self._payload)


class FakeHttpClient:
    """Replays queued responses (or raises queued exceptions) and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeBackend:
    """Scripted backend honouring the AiBackend protocol."""

    name = "fake"

    def __init__(self, answers=None, evaluations=None):
        self.answers = list(answers or [])
        self.evaluations = list(evaluations or [])
        self.answer_calls = []
        self.evaluate_calls = []

    def answer(self, question, age_band, is_first_turn=True, turn_index=0, interests=(), history=None, age=None):
        self.answer_calls.append(
            {
                "question": question,
                "age_band": age_band,
                "is_first_turn": is_first_turn,
                "turn_index": turn_index,
                "interests": list(interests),
                "history": list(history or []),
                "age": age,
            }
        )
        item = self.answers.pop(0) if self.answers else "Plants drink water through roots. What would you ask a plant?"
        if isinstance(item, Exception):
            raise item
        if isinstance(item, AnswerResult):
            return item
        return AnswerResult(text=item, usage=TokenUsage(total_tokens=10))

    def evaluate(self, follow_up_question, prior_answer, child_reply, history=None):
        self.evaluate_calls.append(
            {
                "follow_up_question": follow_up_question,
                "prior_answer": prior_answer,
                "child_reply": child_reply,
            }
        )
        item = self.evaluations.pop(0) if self.evaluations else Evaluation(understood=True, feedback="Great!")
        if isinstance(item, Exception):
            raise item
        return item

    def usage_stats(self):
        return UsageStats(total_tokens=42, conversation_count=2, estimated_cost=0.01,
                          average_tokens_per_conversation=21, cost_per_conversation=0.005)


@pytest.fixture
def fake_backend():
    return FakeBackend()
