"""Recover the follow-up question a generated answer ends with."""
from __future__ import annotations

import re
from typing import Optional

_TRAILING_QUESTION = re.compile(r"([^.!?]*\?)\s*$")
_ANY_QUESTION = re.compile(r"[^.!?]*\?")


def extract_follow_up(text: Optional[str]) -> Optional[str]:
    """Return the last question in ``text``, preferring one that closes it."""

    if not text:
        return None

    match = _TRAILING_QUESTION.search(text)
    if match:
        candidate = match.group(1).strip()
        if candidate != "?":
            return candidate

    questions = [item.strip() for item in _ANY_QUESTION.findall(text)]
    questions = [item for item in questions if item and item != "?"]
    if questions:
        return questions[-1]
    return None


__all__ = ["extract_follow_up"]
