"""Conversation gate: question, understanding check, unlock."""
from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from agents import voice
from agents.age_profile import age_band
from agents.classifier import assess_complexity, assess_engagement, categorize_topic, is_nonsensical, is_new_question
from agents.follow_up import extract_follow_up
from agents.question_generator import generate_example_questions, generate_redirect_questions, suggest_retry_prompt
from agents.types import AgeBand, ChildProfile, ConversationState, Stage, TurnResult
from backends.base import AiBackend
from backends.fallback import generous_evaluation
from llm_gateway import LlmGatewayError
from observability import log_event, span

logger = logging.getLogger(__name__)

DEFAULT_RETRY_PROMPT = "Try again?"


class ProfileSource(Protocol):  # Read side of the parent settings store
    def get_child_profile(self) -> Dict[str, Any]: ...

    def get_selected_interests(self) -> List[str]: ...


class ConversationController:
    """Drives one child's session through ``question -> understanding -> complete``.

    Not reentrant: one live :class:`ConversationState` per controller, replaced
    wholesale after each backend call resolves.
    """

    def __init__(
        self,
        backend: AiBackend,
        profile_source: Optional[ProfileSource] = None,
        *,
        recommender: Callable[[str], Optional[str]] = suggest_retry_prompt,
        session_id: str = "default",
        example_count: int = 3,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._backend = backend
        self._profiles = profile_source
        self._recommender = recommender
        self._rng = rng or random.Random()
        self._example_count = example_count
        self.session_id = session_id
        self._state = ConversationState()

    @property
    def state(self) -> ConversationState:
        return self._state.model_copy()

    def reset(self) -> None:
        self._state = ConversationState()
        log_event("reset", self.session_id, stage="question")

    def load_profile(self) -> ChildProfile:
        """Read the child's profile; each lookup falls back to a neutral default on failure."""

        if self._profiles is None:
            return ChildProfile()
        age: Optional[int] = None
        gender: Optional[str] = None
        interests: List[str] = []
        try:
            raw = self._profiles.get_child_profile() or {}
            age = _coerce_age(raw.get("age"))
            gender = raw.get("gender") or None
        except Exception as exc:  # noqa: BLE001
            logger.warning("Child profile unavailable, using defaults: %s", exc)
        try:
            interests = [str(item) for item in self._profiles.get_selected_interests() or []]
        except Exception as exc:  # noqa: BLE001
            logger.warning("Interests unavailable, using none: %s", exc)
        return ChildProfile(age=age, gender=gender, interests=interests)

    def example_questions(self, count: Optional[int] = None) -> List[str]:
        return generate_example_questions(self.load_profile(), count or self._example_count, self._rng)

    def handle(
        self,
        utterance: str,
        stage: Optional[Stage] = None,
        history: Optional[Iterable[Any]] = None,
    ) -> TurnResult:
        """Process one utterance and return what the shell should show."""

        turns = list(history or [])
        current = self._effective_stage(stage)
        profile = self.load_profile()
        band = age_band(profile.age)
        log_event("turn_start", self.session_id, stage=current, turn_index=len(turns))

        try:
            if current == "complete":
                result = TurnResult(message=voice.render("already_complete", band), stage="complete")
            elif current == "understanding":
                result = self._check_understanding(utterance, profile, band, turns)
            else:
                result = self._answer_question(utterance, profile, band, turns, is_first_turn=not turns)
        except LlmGatewayError as exc:
            logger.error("Backend unavailable session=%s: %s", self.session_id, exc)
            self._state = ConversationState()
            result = TurnResult(message=voice.render("connection_trouble", band), stage="question", error=True)
        except Exception:
            logger.exception("Turn failed session=%s", self.session_id)
            self._state = ConversationState()
            result = TurnResult(message=voice.render("turn_error", band), stage="question", error=True)

        log_event(
            "turn_end",
            self.session_id,
            stage=result.stage,
            decision=_decision(result),
        )
        return result

    def _effective_stage(self, stage: Optional[Stage]) -> Stage:
        if stage is None:
            current = self._state.stage
        else:
            if stage == "question" and self._state.stage != "question":
                # Shell started over; drop whatever was pending.
                self._state = ConversationState()
            current = stage
        if current == "understanding" and not self._state.pending_answer:
            return "question"
        return current

    def _redirect(self, profile: ChildProfile, band: AgeBand) -> TurnResult:
        examples = generate_redirect_questions(profile, self._example_count, self._rng)
        return TurnResult(message=voice.redirect(band, examples), stage="question")

    def _answer_question(
        self,
        utterance: str,
        profile: ChildProfile,
        band: AgeBand,
        turns: List[Any],
        *,
        is_first_turn: bool,
    ) -> TurnResult:
        if is_nonsensical(utterance):
            log_event("nonsense", self.session_id, stage="question", decision="redirect")
            return self._redirect(profile, band)

        with span(self.session_id, "answer"):
            answer = self._backend.answer(
                utterance,
                band,
                is_first_turn=is_first_turn,
                turn_index=len(turns),
                interests=profile.interests,
                history=turns,
                age=profile.age,
            )
        if answer.is_nonsense:
            return self._redirect(profile, band)

        self._state = ConversationState(
            stage="understanding",
            pending_question=utterance,
            pending_answer=answer.text,
        )
        return TurnResult(message=answer.text, stage="understanding", usage=answer.usage)

    def _check_understanding(
        self,
        utterance: str,
        profile: ChildProfile,
        band: AgeBand,
        turns: List[Any],
    ) -> TurnResult:
        if is_new_question(utterance):
            log_event("topic_switch", self.session_id, stage="question")
            self._state = ConversationState()
            return self._answer_question(utterance, profile, band, turns, is_first_turn=True)

        pending = self._state
        prior_answer = pending.pending_answer or ""
        follow_up = extract_follow_up(prior_answer)
        try:
            with span(self.session_id, "evaluate"):
                evaluation = self._backend.evaluate(
                    follow_up or pending.pending_question,
                    prior_answer,
                    utterance,
                    turns,
                )
        except Exception as exc:  # noqa: BLE001
            # A failed judgement never keeps the child locked.
            logger.warning("Evaluation failed session=%s, granting unlock: %s", self.session_id, exc)
            evaluation = generous_evaluation()
        self._track(pending.pending_question or "", utterance, evaluation.understood)

        if evaluation.understood:
            self._state = ConversationState(stage="complete")
            return TurnResult(
                message=voice.congratulate(band, evaluation.feedback),
                stage="complete",
                unlock=True,
            )

        suggestion = evaluation.suggestion or self._recommender(utterance) or DEFAULT_RETRY_PROMPT
        return TurnResult(
            message=voice.retry_message(evaluation.feedback, suggestion),
            stage="understanding",
            retry=True,
        )

    def _track(self, question: str, reply: str, understood: bool) -> None:
        log_event(
            "conversation_tracked",
            self.session_id,
            topics=categorize_topic(question),
            complexity=assess_complexity(reply),
            engagement=assess_engagement(reply),
            outcome="understood" if understood else "retry",
        )


def _coerce_age(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return None


def _decision(result: TurnResult) -> str:
    if result.error:
        return "error"
    if result.unlock:
        return "unlock"
    if result.retry:
        return "retry"
    if result.stage == "understanding":
        return "answered"
    return "stay"


__all__ = ["ConversationController", "DEFAULT_RETRY_PROMPT", "ProfileSource"]
