"""Age-banded phrasing for the messages the child sees."""
from __future__ import annotations

import re
from typing import Dict, Literal, Sequence

from agents.types import AgeBand

Purpose = Literal[
    "unlock",
    "redirect",
    "connection_trouble",
    "turn_error",
    "already_complete",
]

TEMPLATES_YOUNG: Dict[Purpose, str] = {
    "unlock": "{core} Awesome thinking! 🌟 Your computer is unlocked now!",
    "redirect": "Please ask a real question to unlock your computer! 🤔 Try something like: {core}",
    "connection_trouble": "Oops! I'm having trouble connecting right now. 🙈 Can you ask your question again?",
    "turn_error": "Oops, something got mixed up! 🙈 Let's start again. What do you want to know?",
    "already_complete": "You already unlocked your computer! 🎉",
}

TEMPLATES_MIDDLE: Dict[Purpose, str] = {
    "unlock": "{core} Nice thinking! You've unlocked your computer.",
    "redirect": "Ask me a real question to unlock your computer! Try something like: {core}",
    "connection_trouble": "I'm having trouble connecting right now. Please try asking your question again.",
    "turn_error": "Sorry, something went wrong on my side. Let's start over with a new question.",
    "already_complete": "You've already unlocked your computer.",
}

TEMPLATES_TEEN: Dict[Purpose, str] = {
    "unlock": "{core} Solid reasoning. The computer is unlocked.",
    "redirect": "Ask a genuine question to unlock the computer. For example: {core}",
    "connection_trouble": "I'm having trouble connecting right now. Try your question again in a moment.",
    "turn_error": "Sorry, something went wrong on my end. Let's start over with a fresh question.",
    "already_complete": "This session is already unlocked.",
}

_TEMPLATES: Dict[AgeBand, Dict[Purpose, str]] = {
    "young": TEMPLATES_YOUNG,
    "middle": TEMPLATES_MIDDLE,
    "teen": TEMPLATES_TEEN,
}


def _trim_sentences(text: str, max_sentences: int) -> str:
    text = (text or "").strip()
    if not text:
        return ""
    parts = re.split(r"(?<=[.!?])\s+", text)
    kept: list[str] = []
    for part in parts:
        if part:
            kept.append(part.strip())
        if len(kept) >= max_sentences:
            break
    if not kept:
        kept = [text]
    return " ".join(kept).strip()


def render(purpose: Purpose, band: AgeBand, core: str = "", *, max_core_sentences: int = 2) -> str:
    """Fill the band's template for ``purpose`` with a trimmed ``core`` snippet."""

    templates = _TEMPLATES.get(band, TEMPLATES_TEEN)
    template = templates.get(purpose, "{core}")
    if "{core}" not in template:
        return template
    core_text = _trim_sentences(core, max(max_core_sentences, 1))
    return " ".join(template.replace("{core}", core_text).split())


def redirect(band: AgeBand, examples: Sequence[str]) -> str:
    return render("redirect", band, " ".join(examples[:3]), max_core_sentences=3)


def congratulate(band: AgeBand, feedback: str = "") -> str:
    return render("unlock", band, feedback, max_core_sentences=1)


def retry_message(feedback: str, suggestion: str) -> str:
    return " ".join(f"{feedback} {suggestion}".split())


__all__ = ["Purpose", "render", "redirect", "congratulate", "retry_message"]
