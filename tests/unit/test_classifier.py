from __future__ import annotations

import pytest

from agents.classifier import (
    assess_complexity,
    assess_engagement,
    categorize_topic,
    is_new_question,
    is_nonsensical,
)


@pytest.mark.parametrize(
    "text",
    ["", "  ", "hi", "???", "12345", "aaaa", "zzzzzz", "asdfgh", "qwertyuiop", "asdf!!", "bcdfgh", "test", "Hello!", "let me in", "blah"],
)
def test_junk_is_nonsensical(text):
    assert is_nonsensical(text)


@pytest.mark.parametrize(
    "text",
    [
        "food",
        "testing magnets?",
        "Why is the sky blue?",
        "do bees sleep",
        "rhythm",
        "What is 2+2?",
        "Qwerty keyboards: why are the letters arranged like that?",
        "Zxcvbn sounds like a password, what is it?",
    ],
)
def test_real_questions_are_not_nonsense(text):
    assert not is_nonsensical(text)


def test_categorize_topic_lists_all_matches_in_order():
    topics = categorize_topic("Why does the moon orbit the earth?")
    assert topics[0] == "nature"
    assert "space" in topics


def test_categorize_topic_defaults_to_general():
    assert categorize_topic("Tell me something") == ["general"]
    assert categorize_topic(None) == ["general"]


def test_engagement_levels():
    assert assess_engagement("yes") == "low"
    assert assess_engagement("wow that is really cool?") == "high"
    # 10 words (+2) and a connective (+1)
    assert assess_engagement("I think it is big and it goes far away") == "medium"


def test_complexity_levels():
    assert assess_complexity("plants") == "simple"
    assert assess_complexity("It floats because it is light.") == "developing"
    reply = "I think the idea is that boats float because the water pushes up. Rocks are different. They sink!"
    assert assess_complexity(reply) == "complex"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("What do bees eat?", True),
        ("why is the sky blue?", True),
        ("  How do magnets work?", True),
        ("what do bees eat", False),
        ("do bees move fast", False),
        ("is that true?", False),
        ("do you mean really fast?", False),
        ("somehow?", False),
    ],
)
def test_is_new_question(text, expected):
    assert is_new_question(text) is expected
