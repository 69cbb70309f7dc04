from __future__ import annotations  # Provider-agnostic AI backend over the gateway

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from agents.classifier import is_nonsensical
from agents.age_profile import length_budget
from agents.types import AgeBand, AnswerResult, Evaluation, TokenUsage, UsageStats
from config import EvaluationSettings, ProviderRoute
from llm_gateway import HttpClient, LlmGatewayError, LlmUnavailableError, WireFormat, chat, parse_json

from .base import UsageTracker, estimate_tokens, price_usage
from .fallback import NONSENSE_REDIRECT, fallback_answer, generous_evaluation
from .prompts import answer_messages, evaluation_messages

logger = logging.getLogger(__name__)

SERVICE_UNAVAILABLE = 503


class GatewayBackend:
    """One provider route, one wire format, one usage tracker.

    ``answer`` propagates :class:`LlmGatewayError` once retries are exhausted
    (unless the route answers offline on repeated 503s). ``evaluate`` never
    raises: timeouts, transport failures and unparsable verdicts all resolve to
    the generous default.
    """

    def __init__(
        self,
        route: ProviderRoute,
        wire: WireFormat,
        *,
        evaluation: Optional[EvaluationSettings] = None,
        client: Optional[HttpClient] = None,
        usage: Optional[UsageTracker] = None,
        sleep: Callable[[float], None] = time.sleep,
        max_interests: int = 3,
    ) -> None:
        self.route = route
        self.wire = wire
        self.evaluation = evaluation or EvaluationSettings()
        self.usage = usage or UsageTracker()
        self._client = client
        self._sleep = sleep
        self._max_interests = max_interests

    @property
    def name(self) -> str:
        return self.route.name

    def answer(
        self,
        question: str,
        age_band: AgeBand,
        is_first_turn: bool = True,
        turn_index: int = 0,
        interests: Sequence[str] = (),
        history: Optional[Iterable[Any]] = None,
        age: Optional[int] = None,
    ) -> AnswerResult:
        if is_nonsensical(question):
            logger.info("Skipping provider for nonsensical question route=%s", self.name)
            return AnswerResult(text=NONSENSE_REDIRECT, usage=TokenUsage(), is_nonsense=True)

        budget = length_budget(age_band, is_first_turn)
        messages = answer_messages(
            question,
            age_band,
            is_first_turn=is_first_turn,
            turn_index=turn_index,
            interests=list(interests)[: self._max_interests],
            history=history,
            age=age,
        )
        try:
            reply = chat(
                messages,
                wire=self.wire,
                cfg=self.route,
                client=self._client,
                options={"temperature": self.route.temperature, "max_tokens": budget.max_tokens},
                sleep=self._sleep,
            )
        except LlmUnavailableError as exc:
            if self.route.fallback_on_unavailable and exc.status == SERVICE_UNAVAILABLE:
                return self._offline_answer(question)
            raise

        text = reply.text.strip()
        if not text:
            raise LlmGatewayError(f"Provider '{self.name}' returned an empty answer")
        usage = price_usage(self.route, reply.usage, question, text)
        self.usage.record(usage, conversation=True)
        return AnswerResult(text=text, usage=usage)

    def evaluate(
        self,
        follow_up_question: Optional[str],
        prior_answer: str,
        child_reply: str,
        history: Optional[Iterable[Any]] = None,
    ) -> Evaluation:
        # A lingering worker may finish after the deadline; its usage still counts.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="evaluate")
        try:
            future = executor.submit(self._judge, follow_up_question, prior_answer, child_reply, history)
            return future.result(timeout=self.evaluation.deadline_s)
        except FutureTimeout:
            logger.warning(
                "Evaluation deadline %.1fs exceeded route=%s; using generous default",
                self.evaluation.deadline_s,
                self.name,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Evaluation failed route=%s; using generous default: %s", self.name, exc)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return generous_evaluation()

    def usage_stats(self) -> UsageStats:
        return self.usage.stats()

    def test_connection(self) -> Dict[str, Any]:
        """Ask a trivial question end to end; never raises."""

        try:
            result = self.answer("What is 2+2?", "teen")
        except Exception as exc:  # noqa: BLE001
            logger.error("Connection check failed route=%s: %s", self.name, exc)
            return {"success": False, "provider": self.name, "error": str(exc)}
        return {"success": True, "provider": self.name, "answer": result.text, "fallback": result.is_fallback}

    def _judge(
        self,
        follow_up_question: Optional[str],
        prior_answer: str,
        child_reply: str,
        history: Optional[Iterable[Any]],
    ) -> Evaluation:
        messages = evaluation_messages(follow_up_question, prior_answer, child_reply, history)
        reply = chat(
            messages,
            wire=self.wire,
            cfg=self.route,
            schema=Evaluation,
            client=self._client,
            options={"temperature": self.evaluation.temperature, "max_tokens": self.evaluation.max_tokens},
            timeout_s=self.evaluation.deadline_s,
            sleep=self._sleep,
        )
        evaluation = parse_json(Evaluation, reply.text)
        usage = price_usage(self.route, reply.usage, prior_answer, child_reply, reply.text)
        self.usage.record(usage, conversation=False)
        return evaluation

    def _offline_answer(self, question: str) -> AnswerResult:
        logger.error("Provider '%s' unavailable (503); answering offline", self.name)
        text = fallback_answer(question)
        usage = price_usage(self.route, TokenUsage(total_tokens=estimate_tokens(question, text)))
        self.usage.record(usage, conversation=True)
        return AnswerResult(text=text, usage=usage, is_fallback=True)


__all__ = ["GatewayBackend", "SERVICE_UNAVAILABLE"]
