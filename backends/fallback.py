"""Canned replies used when the provider is skipped or unreachable."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from agents.types import Evaluation

NONSENSE_REDIRECT = (
    "Please ask a real question to unlock your computer! 🤔 "
    "Try something like: How do airplanes fly? Why is the sky blue? How do computers work?"
)

FALLBACK_ANSWERS: Mapping[str, str] = MappingProxyType(
    {
        "what is 2+2": (
            "That's a great math question! 2+2 equals 4. Think of it like having 2 apples and getting "
            "2 more apples - now you have 4 apples total!"
        ),
        "why is the sky blue": (
            "Great question! The sky is blue because of something called scattering. Sunlight has all the "
            "colors of the rainbow, but blue light bounces around in the air more than other colors, making "
            "the sky look blue!"
        ),
        "how do airplanes fly": (
            "Airplanes fly because of lift! The wings are shaped so that air moves faster over the top than "
            "the bottom, creating lift that pushes the plane up into the sky."
        ),
        "what makes rainbows": (
            "Rainbows happen when sunlight hits raindrops! The light bends and splits into all the colors of "
            "the rainbow - red, orange, yellow, green, blue, indigo, and violet!"
        ),
        "why do we dream": (
            "Scientists think we dream to help our brains process what we learned during the day. It's like "
            "our brain is organizing and practicing while we sleep!"
        ),
        "how do magnets work": (
            "Magnets work because of invisible forces! They have a north and south pole, and opposite poles "
            "attract while same poles repel. It's like magic, but it's science!"
        ),
    }
)

FALLBACK_FOLLOW_UP = "What do you think about this explanation?"

GENERIC_FALLBACK = (
    "That's a really interesting question! I'm having trouble connecting to my knowledge right now, "
    "but I'd love to help you learn about this. Can you try asking a different question about science, "
    "nature, or how things work?"
)

GENEROUS_FEEDBACK = "Good effort! You can unlock your computer now."


def fallback_answer(question: str) -> str:
    """Keyword-matched offline answer; unknown questions get a gentle nudge instead."""

    lowered = (question or "").lower()
    for key, reply in FALLBACK_ANSWERS.items():
        if key in lowered:
            return f"{reply}\n\n{FALLBACK_FOLLOW_UP}"
    return GENERIC_FALLBACK


def generous_evaluation() -> Evaluation:
    return Evaluation(understood=True, feedback=GENEROUS_FEEDBACK, suggestion=None)


__all__ = [
    "FALLBACK_ANSWERS",
    "FALLBACK_FOLLOW_UP",
    "GENERIC_FALLBACK",
    "GENEROUS_FEEDBACK",
    "NONSENSE_REDIRECT",
    "fallback_answer",
    "generous_evaluation",
]
