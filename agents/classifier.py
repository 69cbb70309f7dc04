"""Shallow keyword/pattern classification of short child utterances.

Every function here is pure: the pattern tables are compiled once from
``config/patterns.yaml`` and never mutated afterwards.
"""
from __future__ import annotations

from typing import List, Optional

from agents.types import ComplexityLevel, EngagementLevel, Topic
from config.patterns import PatternTables, pattern_tables


def _tables(tables: Optional[PatternTables]) -> PatternTables:
    return tables if tables is not None else pattern_tables()


def _word_count(text: str) -> int:
    return len(text.split())


def is_nonsensical(text: Optional[str], *, tables: Optional[PatternTables] = None) -> bool:
    """True for junk input: too short, keyboard mashing, fillers, no letters."""

    return _tables(tables).nonsense_hit(text) is not None


def categorize_topic(text: Optional[str], *, tables: Optional[PatternTables] = None) -> List[Topic]:
    """Return every matching topic in table order, or ``["general"]``."""

    sample = text or ""
    found: List[Topic] = [
        topic  # type: ignore[misc]
        for topic, pattern in _tables(tables).topics.items()
        if pattern.search(sample)
    ]
    return found or ["general"]


def assess_engagement(text: Optional[str], *, tables: Optional[PatternTables] = None) -> EngagementLevel:
    cfg = _tables(tables)
    sample = text or ""
    words = _word_count(sample)

    score = 0
    if words > 15:
        score += 3
    elif words > 8:
        score += 2
    elif words > 3:
        score += 1

    if "?" in sample:
        score += 2
    if cfg.emotional.search(sample):
        score += 2
    if cfg.connective.search(sample):
        score += 1

    if score >= 6:
        return "high"
    if score >= 3:
        return "medium"
    return "low"


def assess_complexity(text: Optional[str], *, tables: Optional[PatternTables] = None) -> ComplexityLevel:
    cfg = _tables(tables)
    sample = text or ""
    words = _word_count(sample)

    score = 0
    if words > 20:
        score += 2
    elif words > 10:
        score += 1

    if cfg.conjunction.search(sample):
        score += 3
    if len(cfg.sentence_break.split(sample)) > 2:
        score += 2
    if cfg.comparison.search(sample):
        score += 2
    if cfg.abstraction.search(sample):
        score += 3

    if score >= 6:
        return "complex"
    if score >= 3:
        return "developing"
    return "simple"


def is_new_question(text: Optional[str], *, tables: Optional[PatternTables] = None) -> bool:
    """True only for ``?``-bearing text that opens with an interrogative word.

    Replies such as "do you mean really fast?" stay answers to the pending
    follow-up.
    """

    sample = (text or "").strip()
    if "?" not in sample:
        return False
    return _tables(tables).interrogative_start.match(sample) is not None


__all__ = [
    "assess_complexity",
    "assess_engagement",
    "categorize_topic",
    "is_new_question",
    "is_nonsensical",
]
