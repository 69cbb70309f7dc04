"""Age band resolution and band-specific voice profiles."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel

from agents.types import AgeBand

DEFAULT_BAND: AgeBand = "teen"


class AgeProfile(BaseModel):
    band: AgeBand
    age_range: str
    name: str
    cognitive: str
    approach: str
    voice: str
    style: str
    engagement: str
    examples: str
    follow_up_examples: str
    sample_follow_up: str
    question_guidelines: str


class LengthBudget(BaseModel):
    instruction: str
    max_tokens: int


_PROFILES: Dict[AgeBand, AgeProfile] = {
    "young": AgeProfile(
        band="young",
        age_range="5-8",
        name="Explorer",
        cognitive="Concrete thinking, love 'why' questions",
        approach="Wonder-based, tangible connections",
        voice="Be playful, enthusiastic, and use simple words",
        style="Short sentences, emojis, fun tone 🌟",
        engagement="Use 'wow!', 'cool!', make it feel like an adventure",
        examples="Talk about animals, colors, simple science, favorite things",
        follow_up_examples="What do you think happens when...? / Can you imagine if...?",
        sample_follow_up="What do you think would happen if animals could build spaceships too?",
        question_guidelines=(
            '- "What would happen if..." type questions\n'
            '- Connect to their experiences: "Where else have you seen..."\n'
            '- Imagination-based: "What do you think it would be like if..."\n'
            '- Simple cause-effect: "Why do you think..."'
        ),
    ),
    "middle": AgeProfile(
        band="middle",
        age_range="9-12",
        name="Investigator",
        cognitive="Beginning abstract thought, enjoy 'how' questions",
        approach="Process-focused, connections between ideas",
        voice="Be an engaging storyteller and knowledge explorer",
        style="Moderate complexity, use analogies and real examples",
        engagement="Share 'Did you know?' facts, connect to their world",
        examples="Space, inventions, nature mysteries, how things work",
        follow_up_examples="How do you think this connects to...? / What would happen if we changed...?",
        sample_follow_up="How do you think this technology could help us explore even further?",
        question_guidelines=(
            '- "How do you think this connects to..."\n'
            '- Process questions: "What would happen if we changed..."\n'
            '- Comparison questions: "How is this similar to..."\n'
            '- "What patterns do you notice..."'
        ),
    ),
    "teen": AgeProfile(
        band="teen",
        age_range="13-17",
        name="Philosopher",
        cognitive="Abstract reasoning, appreciate 'what if' questions",
        approach="Hypothetical scenarios, respecting their intelligence",
        voice="Be a thoughtful peer having an intelligent discussion",
        style="Sophisticated language, respect their maturity",
        engagement="Real-world connections, thought experiments",
        examples="Technology, society, future possibilities, complex systems",
        follow_up_examples="What implications does this have for...? / How might this challenge...?",
        sample_follow_up="What challenges do you think we'd face trying to travel between stars?",
        question_guidelines=(
            '- "What implications does this have for..."\n'
            '- "How might this challenge the idea that..."\n'
            '- "What assumptions are we making about..."\n'
            '- "How might someone disagree with this..."'
        ),
    ),
}

# First answers are kept punchy; continuations get more room.
_LENGTH_BUDGETS: Dict[str, Dict[AgeBand, LengthBudget]] = {
    "first": {
        "young": LengthBudget(
            instruction="Keep it short and punchy: 2-3 simple sentences, then your follow-up question",
            max_tokens=120,
        ),
        "middle": LengthBudget(
            instruction="Keep it punchy: one short paragraph (3-4 sentences), then your follow-up question",
            max_tokens=160,
        ),
        "teen": LengthBudget(
            instruction="Keep it tight: one focused paragraph, then your follow-up question",
            max_tokens=200,
        ),
    },
    "continued": {
        "young": LengthBudget(
            instruction="Keep answers short: up to 4 simple sentences, then your follow-up question",
            max_tokens=200,
        ),
        "middle": LengthBudget(
            instruction="Keep answers concise (1-2 short paragraphs), then your follow-up question",
            max_tokens=300,
        ),
        "teen": LengthBudget(
            instruction="Keep answers concise (2-3 paragraphs max), then your follow-up question",
            max_tokens=400,
        ),
    },
}


def age_band(age: Any) -> AgeBand:
    """Map a numeric age to its developmental band.

    Fractional ages truncate. Ages below 5 clamp to ``young`` and above 17
    clamp to ``teen``. Missing or unparsable ages resolve to ``teen``.
    """

    if age is None or isinstance(age, bool):
        return DEFAULT_BAND
    try:
        value = int(float(str(age).strip()))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_BAND
    if value <= 8:
        return "young"
    if value <= 12:
        return "middle"
    return "teen"


def profile_for(band: AgeBand) -> AgeProfile:
    return _PROFILES.get(band, _PROFILES[DEFAULT_BAND])


def length_budget(band: AgeBand, is_first_turn: bool) -> LengthBudget:
    budgets = _LENGTH_BUDGETS["first" if is_first_turn else "continued"]
    return budgets.get(band, budgets[DEFAULT_BAND])


__all__ = ["AgeProfile", "LengthBudget", "DEFAULT_BAND", "age_band", "profile_for", "length_budget"]
