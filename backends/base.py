from __future__ import annotations  # Backend contract and shared usage accounting

import math
import threading
from typing import Any, Iterable, Optional, Protocol, Sequence

from agents.types import AgeBand, AnswerResult, Evaluation, TokenUsage, UsageStats
from config import ProviderRoute


class AiBackend(Protocol):  # What the conversation controller needs from a provider
    def answer(
        self,
        question: str,
        age_band: AgeBand,
        is_first_turn: bool = True,
        turn_index: int = 0,
        interests: Sequence[str] = (),
        history: Optional[Iterable[Any]] = None,
        age: Optional[int] = None,
    ) -> AnswerResult: ...

    def evaluate(
        self,
        follow_up_question: Optional[str],
        prior_answer: str,
        child_reply: str,
        history: Optional[Iterable[Any]] = None,
    ) -> Evaluation: ...


class UsageTracker:
    """Process-lifetime token and cost totals for one backend."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_tokens = 0
        self._conversation_count = 0
        self._estimated_cost = 0.0

    def record(self, usage: TokenUsage, *, conversation: bool = True) -> None:
        with self._lock:
            self._total_tokens += usage.total_tokens
            self._estimated_cost += usage.estimated_cost
            if conversation:
                self._conversation_count += 1

    def stats(self) -> UsageStats:
        with self._lock:
            total = self._total_tokens
            count = self._conversation_count
            cost = self._estimated_cost
        return UsageStats(
            total_tokens=total,
            conversation_count=count,
            estimated_cost=cost,
            average_tokens_per_conversation=round(total / count) if count else 0,
            cost_per_conversation=cost / count if count else 0.0,
        )


def estimate_tokens(*texts: str) -> int:  # Roughly four characters per token
    return math.ceil(sum(len(text or "") for text in texts) / 4)


def price_usage(route: ProviderRoute, usage: Optional[TokenUsage], *estimate_from: str) -> TokenUsage:
    """Attach an estimated cost, estimating the token count when none was reported."""

    if usage is None or (usage.total_tokens == 0 and usage.prompt_tokens == 0 and usage.completion_tokens == 0):
        usage = TokenUsage(total_tokens=estimate_tokens(*estimate_from))
    total = usage.total_tokens or usage.prompt_tokens + usage.completion_tokens
    if usage.prompt_tokens or usage.completion_tokens:
        cost = (
            usage.prompt_tokens / 1000 * route.input_cost_per_1k
            + usage.completion_tokens / 1000 * route.output_cost_per_1k
        )
    else:
        cost = total / 1000 * route.flat_cost_per_1k
    return usage.model_copy(update={"total_tokens": total, "estimated_cost": cost})


__all__ = ["AiBackend", "UsageTracker", "estimate_tokens", "price_usage"]
