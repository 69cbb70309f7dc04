"""YAML-driven keyword and pattern tables for the utterance classifier."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

CONFIG_PATH = os.environ.get("CLASSIFIER_PATTERNS", str(Path(__file__).with_name("patterns.yaml")))


@dataclass
class PatternHit:
    """Nonsense category that matched an utterance."""

    category: str
    pattern: str


@dataclass
class PatternTables:
    """Compiled classifier tables; immutable once built."""

    min_length: int
    nonsense: Dict[str, List[re.Pattern[str]]]
    topics: Dict[str, re.Pattern[str]]
    emotional: re.Pattern[str]
    connective: re.Pattern[str]
    conjunction: re.Pattern[str]
    comparison: re.Pattern[str]
    abstraction: re.Pattern[str]
    sentence_break: re.Pattern[str]
    interrogatives: Tuple[str, ...]
    interrogative_start: re.Pattern[str] = field(init=False)
    normalizers: Tuple[str, ...] = ("strip_whitespace",)

    def __post_init__(self) -> None:
        words = "|".join(re.escape(word) for word in self.interrogatives)
        self.interrogative_start = re.compile(rf"^\W*({words})\b", re.IGNORECASE)

    # ------------------------------------------------------------------
    # Normalization helpers
    # ------------------------------------------------------------------
    def normalize(self, text: Optional[str]) -> str:
        sample = text or ""
        if "strip_whitespace" in self.normalizers:
            sample = sample.strip()
        if "collapse_spaces" in self.normalizers:
            sample = re.sub(r"\s+", " ", sample)
        return sample

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------
    def nonsense_hit(self, text: Optional[str]) -> Optional[PatternHit]:
        """Return the first junk category matching ``text``, if any."""

        sample = self.normalize(text)
        if len(sample) < self.min_length:
            return PatternHit(category="too_short", pattern=f"len<{self.min_length}")
        for category, patterns in self.nonsense.items():
            for pattern in patterns:
                if pattern.search(sample):
                    return PatternHit(category=category, pattern=pattern.pattern)
        return None


def _load_yaml(path: str) -> dict:
    import yaml  # local import keeps module import cheap

    with open(path, "r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def build_tables(cfg: dict) -> PatternTables:
    """Compile a raw YAML mapping into :class:`PatternTables`."""

    nonsense_cfg = cfg.get("nonsense", {})
    engagement = cfg.get("engagement", {})
    complexity = cfg.get("complexity", {})
    return PatternTables(
        min_length=int(nonsense_cfg.get("min_length", 3)),
        nonsense={
            name: [re.compile(pattern) for pattern in patterns or []]
            for name, patterns in nonsense_cfg.get("categories", {}).items()
        },
        topics={name: re.compile(pattern) for name, pattern in cfg.get("topics", {}).items()},
        emotional=re.compile(engagement["emotional"]),
        connective=re.compile(engagement["connective"]),
        conjunction=re.compile(complexity["conjunction"]),
        comparison=re.compile(complexity["comparison"]),
        abstraction=re.compile(complexity["abstraction"]),
        sentence_break=re.compile(complexity.get("sentence_break", r"[.!?]")),
        interrogatives=tuple(str(word).lower() for word in cfg.get("interrogatives", [])),
        normalizers=tuple(cfg.get("normalizers", ["strip_whitespace"])),
    )


def load_tables(path: str = CONFIG_PATH) -> PatternTables:
    """Load and compile the tables stored at ``path``."""

    return build_tables(_load_yaml(path))


_tables: Optional[PatternTables] = None


def pattern_tables() -> PatternTables:
    global _tables
    if _tables is None:
        _tables = load_tables()
    return _tables


__all__ = [
    "CONFIG_PATH",
    "PatternHit",
    "PatternTables",
    "build_tables",
    "load_tables",
    "pattern_tables",
]
