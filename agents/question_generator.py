"""Example and follow-up question generation from the static question banks."""
from __future__ import annotations

import random
import re
from typing import Dict, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from agents import question_bank as bank
from agents.age_profile import age_band
from agents.classifier import assess_complexity, assess_engagement, categorize_topic
from agents.types import AgeBand, ChildProfile

T = TypeVar("T")

_BAND_ORDER: Sequence[AgeBand] = ("young", "middle", "teen")
_PERSONALIZE = re.compile(r"this (animal|technology|sport|art|music)", re.IGNORECASE)


class ResponseStrategy(BaseModel):
    complexity: str
    next_question: str
    technique: str


class ComplexityRecommendation(BaseModel):
    complexity: AgeBand
    question_type: str
    examples: List[str]
    style: str
    reasoning: str


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def _shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    shuffled = list(items)
    rng.shuffle(shuffled)
    return shuffled


def personalize_question(template: str, interest: str) -> str:
    """Swap the generic subject of a template for the child's interest."""

    return _PERSONALIZE.sub(interest.lower(), template)


def generate_interest_questions(band: AgeBand, interests: Sequence[str], max_count: int) -> List[str]:
    questions: List[str] = []
    for interest in list(interests)[:max_count]:
        category = bank.interest_category(interest)
        if category is None:
            continue
        templates = bank.INTEREST_TEMPLATES.get(category)
        if templates and band in templates:
            questions.append(personalize_question(templates[band], interest))
    return questions


def is_patronizing(text: str) -> bool:
    lowered = text.lower()
    return any(phrase.lower() in lowered for phrase in bank.PATRONIZING_PHRASES)


def _respectful(candidates: Sequence[str]) -> List[str]:
    return [item for item in candidates if not is_patronizing(item)]


def generate_general_questions(band: AgeBand, count: int, rng: Optional[random.Random] = None) -> List[str]:
    return _shuffled(bank.GENERAL_QUESTIONS[band], _rng(rng))[:count]


def generate_example_questions(
    profile: ChildProfile,
    count: int = 3,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Personalized starter questions shown before a conversation begins."""

    rand = _rng(rng)
    band = age_band(profile.age)
    questions = _respectful(generate_interest_questions(band, profile.interests, count))
    if len(questions) < count:
        seen = set(questions)
        for candidate in generate_general_questions(band, len(bank.GENERAL_QUESTIONS[band]), rand):
            if len(questions) >= count:
                break
            if candidate not in seen and not is_patronizing(candidate):
                questions.append(candidate)
                seen.add(candidate)
    return _shuffled(questions, rand)[:count]


def generate_redirect_questions(
    profile: ChildProfile,
    count: int = 3,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Short starter questions offered after a nonsense utterance.

    Interest questions come first, then the band's fixed starters.
    """

    rand = _rng(rng)
    band = age_band(profile.age)
    questions = _respectful(generate_interest_questions(band, profile.interests, count))
    for candidate in _shuffled(bank.EXAMPLE_QUESTIONS[band], rand):
        if len(questions) >= count:
            break
        if candidate not in questions and not is_patronizing(candidate):
            questions.append(candidate)
    return questions[:count]


def generate_socratic_follow_up(band: AgeBand, rng: Optional[random.Random] = None) -> str:
    technique = _rng(rng).choice(sorted(bank.SOCRATIC_TECHNIQUES))
    return bank.SOCRATIC_TECHNIQUES[technique][band]


def generate_follow_up_question(
    original_question: str,
    profile: ChildProfile,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a band-appropriate follow-up stem for the question's topic."""

    rand = _rng(rng)
    band = age_band(profile.age)
    for topic in categorize_topic(original_question):
        if topic in bank.TOPIC_FRAMEWORK_ALIASES:
            candidates = _respectful(bank.framework_for(topic, band))
            if candidates:
                return rand.choice(candidates)
    # Uncategorized questions get a generic Socratic question.
    return generate_socratic_follow_up(band, rand)


def generate_scenario_question(scenario: str, profile: ChildProfile) -> Optional[str]:
    templates = bank.SCENARIO_QUESTIONS.get(scenario)
    if templates is None:
        return None
    return templates[age_band(profile.age)]


def next_question_level(reply: str) -> ResponseStrategy:
    """Coaching prompt matched to how elaborate the child's reply was."""

    complexity = assess_complexity(reply)
    strategy = bank.RESPONSE_STRATEGIES[complexity]
    return ResponseStrategy(
        complexity=complexity,
        next_question=strategy["next_question"],
        technique=strategy["technique"],
    )


def suggest_retry_prompt(reply: str) -> str:
    return next_question_level(reply).next_question


def _shift(band: AgeBand, step: int) -> AgeBand:
    index = _BAND_ORDER.index(band) + step
    index = max(0, min(len(_BAND_ORDER) - 1, index))
    return _BAND_ORDER[index]


def recommend_next_complexity(profile: ChildProfile, last_reply: str) -> ComplexityRecommendation:
    band = age_band(profile.age)
    engagement = assess_engagement(last_reply)
    complexity = assess_complexity(last_reply)

    target = band
    if engagement == "high" and complexity == "complex":
        target = _shift(band, 1)
    elif engagement == "low" or complexity == "simple":
        target = _shift(band, -1)

    approach: Dict[str, object] = dict(bank.APPROACHES[target])
    return ComplexityRecommendation(
        complexity=target,
        question_type=str(approach["question_type"]),
        examples=list(approach["examples"]),  # type: ignore[call-overload]
        style=str(approach["style"]),
        reasoning=f"Based on {engagement} engagement and {complexity} response complexity",
    )


def generate_adaptive_follow_up(
    profile: ChildProfile,
    last_reply: str,
    rng: Optional[random.Random] = None,
) -> str:
    rand = _rng(rng)
    recommendation = recommend_next_complexity(profile, last_reply)
    candidates = _respectful(recommendation.examples)
    if not candidates:
        return generate_socratic_follow_up(recommendation.complexity, rand)
    return rand.choice(candidates)


__all__ = [
    "ComplexityRecommendation",
    "ResponseStrategy",
    "generate_adaptive_follow_up",
    "generate_example_questions",
    "generate_redirect_questions",
    "generate_follow_up_question",
    "generate_general_questions",
    "generate_interest_questions",
    "generate_scenario_question",
    "generate_socratic_follow_up",
    "is_patronizing",
    "next_question_level",
    "personalize_question",
    "recommend_next_complexity",
    "suggest_retry_prompt",
]
