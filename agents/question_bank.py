"""Static Socratic question banks indexed by topic, interest, and age band."""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from agents.types import AgeBand

Templates = Tuple[str, ...]
BandTemplates = Mapping[AgeBand, Templates]

QUESTION_FRAMEWORKS: Mapping[str, BandTemplates] = MappingProxyType(
    {
        "science": {
            "young": (
                "What do you think would happen if we tried this differently?",
                "Where else have you seen something like this?",
                "What does this remind you of?",
                "How do you think this works?",
                "What would you want to try next?",
            ),
            "middle": (
                "What patterns do you notice here?",
                "How might this connect to something else you know?",
                "What would happen if we changed one thing?",
                "Why do you think this works this way?",
                "How could we test your idea?",
            ),
            "teen": (
                "What assumptions are we making here?",
                "How might this principle apply to other situations?",
                "What are the implications of this discovery?",
                "How does this challenge what we thought we knew?",
                "What ethical questions does this raise?",
            ),
        },
        "nature": {
            "young": (
                "What do you wonder about this?",
                "How do you think animals/plants feel about this?",
                "What would it be like to be this creature?",
                "What job does this have in nature?",
                "What story could this tell us?",
            ),
            "middle": (
                "What survival strategies do you notice?",
                "How do different parts of this system work together?",
                "What would happen if this wasn't here?",
                "How has this adapted to its environment?",
                "What relationships do you see between living things?",
            ),
            "teen": (
                "What evolutionary pressures shaped this?",
                "How do human actions impact this ecosystem?",
                "What philosophical questions does this raise about life?",
                "How might climate change affect this in the future?",
                "What can this teach us about sustainability?",
            ),
        },
        "social": {
            "young": (
                "How do you think that person felt?",
                "What would you do in that situation?",
                "Why do you think people act this way?",
                "How could we help in this situation?",
                "What would make this fair for everyone?",
            ),
            "middle": (
                "What different perspectives might people have?",
                "What factors might influence someone's decision?",
                "How do cultural differences affect this situation?",
                "What would you need to know to make a good choice?",
                "How might this look different in another time or place?",
            ),
            "teen": (
                "What systemic factors contribute to this issue?",
                "How do power dynamics play a role here?",
                "What historical context helps us understand this?",
                "How might different philosophical approaches view this?",
                "What are the long-term consequences of different choices?",
            ),
        },
        "arts": {
            "young": (
                "What feelings does this give you?",
                "What story do you see in this?",
                "What would happen if you changed this part?",
                "How does this make you want to move/sing/draw?",
                "What would you add to make it even more interesting?",
            ),
            "middle": (
                "What techniques did the artist use to create this effect?",
                "How does this reflect the time period it was made?",
                "What emotions is the artist trying to convey?",
                "How might different people interpret this differently?",
                "What influences do you see from other artists or cultures?",
            ),
            "teen": (
                "How does this challenge conventional artistic boundaries?",
                "What social or political commentary might this contain?",
                "How does the medium affect the message?",
                "What philosophical questions does this artwork raise?",
                "How might this influence future artistic movements?",
            ),
        },
    }
)

# Classifier topics that share a framework with a differently named bucket.
TOPIC_FRAMEWORK_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "science": "science",
        "space": "science",
        "technology": "science",
        "nature": "nature",
        "social": "social",
        "history": "social",
        "philosophy": "social",
        "art": "arts",
    }
)

DEFAULT_FRAMEWORK = "science"

SOCRATIC_TECHNIQUES: Mapping[str, Mapping[AgeBand, str]] = MappingProxyType(
    {
        "clarification": {
            "young": "Can you tell me more about that?",
            "middle": "What do you mean when you say...?",
            "teen": "How does this relate to what we discussed earlier?",
        },
        "assumptions": {
            "young": "What makes you think that?",
            "middle": "What if someone disagreed with that idea?",
            "teen": "What assumptions are we making here?",
        },
        "evidence": {
            "young": "How do you know that?",
            "middle": "What evidence supports that thinking?",
            "teen": "What might someone who disagrees point to?",
        },
        "perspective": {
            "young": "How might someone else see this?",
            "middle": "What would this look like from another viewpoint?",
            "teen": "How might your perspective be shaped by your experiences?",
        },
        "implications": {
            "young": "What do you think might happen next?",
            "middle": "If that's true, what else would have to be true?",
            "teen": "What are the broader implications of this thinking?",
        },
    }
)

INTEREST_TEMPLATES: Mapping[str, Mapping[AgeBand, str]] = MappingProxyType(
    {
        "animals": {
            "young": "If you could ask this animal one question, what would it be?",
            "middle": "How do you think this animal's life compares to yours?",
            "teen": "What ethical responsibilities do humans have toward this species?",
        },
        "technology": {
            "young": "What would happen if this technology didn't exist?",
            "middle": "How has this technology changed the way people live?",
            "teen": "What unintended consequences might this technology have?",
        },
        "sports": {
            "young": "What's the most exciting thing about this sport?",
            "middle": "How do you think strategy affects the outcome?",
            "teen": "How does this sport reflect broader cultural values?",
        },
        "art": {
            "young": "What would you create if you could make anything?",
            "middle": "How do artists communicate ideas through their work?",
            "teen": "How does art influence social change?",
        },
        "music": {
            "young": "How does this music make your body want to move?",
            "middle": "What emotions is this composer trying to create?",
            "teen": "How does music reflect the society that creates it?",
        },
        "history": {
            "young": "What would it be like to live in that time?",
            "middle": "How did people's daily lives differ from ours?",
            "teen": "What lessons from this period apply to today's challenges?",
        },
    }
)

# Interest labels outside this table are ignored for templating.
INTEREST_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "Animals": "animals",
        "Dogs": "animals",
        "Cats": "animals",
        "Birds": "animals",
        "Technology": "technology",
        "Programming": "technology",
        "Robotics": "technology",
        "Soccer": "sports",
        "Basketball": "sports",
        "Swimming": "sports",
        "Art": "art",
        "Drawing": "art",
        "Painting": "art",
        "Photography": "art",
        "Music": "music",
        "Singing": "music",
        "Dancing": "music",
        "History": "history",
        "Ancient Civilizations": "history",
    }
)

RESPONSE_STRATEGIES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "simple": {
            "next_question": "Can you tell me more about what you're thinking?",
            "technique": "Open up the conversation gently",
        },
        "developing": {
            "next_question": "What connections do you see between this and...?",
            "technique": "Help them make connections",
        },
        "complex": {
            "next_question": "How might others challenge that perspective?",
            "technique": "Introduce complexity and nuance",
        },
    }
)

APPROACHES: Mapping[AgeBand, Mapping[str, object]] = MappingProxyType(
    {
        "young": {
            "question_type": "Wonder-based and experiential",
            "examples": ("What would happen if...", "How do you think it feels to...", "Where else have you seen..."),
            "style": "Simple, concrete, imaginative",
        },
        "middle": {
            "question_type": "Process and connection-focused",
            "examples": (
                "How do you think this connects to...",
                "What patterns do you notice...",
                "Why might this work differently if...",
            ),
            "style": "Investigative, comparative, logical",
        },
        "teen": {
            "question_type": "Abstract and analytical",
            "examples": (
                "What implications does this have...",
                "How might someone challenge this...",
                "What assumptions are we making...",
            ),
            "style": "Critical thinking, multiple perspectives, complexity",
        },
    }
)

GENERAL_QUESTIONS: Mapping[AgeBand, Templates] = MappingProxyType(
    {
        "young": (
            "Why do you think shadows change size during the day?",
            "What would happen if gravity was half as strong?",
            "How do you think animals choose where to build their homes?",
            "What makes some foods taste sweet and others salty?",
            "Why do some things float in water and others sink?",
        ),
        "middle": (
            "How does your brain decide what to remember and what to forget?",
            "What would society be like if everyone could read minds?",
            "How do different cultures solve the same problems differently?",
            "What makes some inventions change the world while others don't?",
            "How does the language you speak affect how you think?",
        ),
        "teen": (
            "How do you think artificial intelligence will change human relationships?",
            "What ethical responsibilities do we have to future generations?",
            "How do social media algorithms influence democratic societies?",
            "What role should science play in making policy decisions?",
            "How might space exploration change humanity's perspective on Earth?",
        ),
    }
)

SCENARIO_QUESTIONS: Mapping[str, Mapping[AgeBand, str]] = MappingProxyType(
    {
        "mealtime": {
            "young": "What do you think this food had to go through to get to our table?",
            "middle": "How do different cultures prepare similar ingredients?",
            "teen": "What economic and environmental factors influence our food choices?",
        },
        "outdoors": {
            "young": "What do you notice that's different from yesterday?",
            "middle": "How do you think this ecosystem balances itself?",
            "teen": "What human impact do you observe in this environment?",
        },
        "creative_time": {
            "young": "What story is your creation telling?",
            "middle": "How did your approach change as you worked?",
            "teen": "How does your creative process reflect your thinking style?",
        },
        "current_events": {
            "young": "How do you think this affects people's daily lives?",
            "middle": "What different perspectives might people have on this?",
            "teen": "What historical patterns do you see reflected in this situation?",
        },
    }
)

# Short starter questions offered when a child cannot think of one.
EXAMPLE_QUESTIONS: Mapping[AgeBand, Templates] = MappingProxyType(
    {
        "young": (
            "Why is the sky blue?",
            "How do airplanes fly?",
            "What makes rainbows?",
            "Why do we dream?",
            "How do magnets work?",
        ),
        "middle": (
            "How does the internet work?",
            "What causes earthquakes?",
            "Why do we have seasons?",
            "How do vaccines work?",
            "What is DNA?",
        ),
        "teen": (
            "What is quantum computing?",
            "How does cryptocurrency work?",
            "What causes climate change?",
            "How does AI learn?",
            "What is dark matter?",
        ),
    }
)

PATRONIZING_PHRASES: Templates = (
    "Good job!",
    "Great question!",
    "You're so smart!",
    "What color is this?",
    "How many do you see?",
    "Can you count these?",
    "That's right!",
    "Very good!",
    "Perfect!",
)


def framework_for(topic: str, band: AgeBand) -> Templates:
    """Templates for a classifier topic, falling back to the science bank."""

    bucket = TOPIC_FRAMEWORK_ALIASES.get(topic, DEFAULT_FRAMEWORK)
    return QUESTION_FRAMEWORKS[bucket][band]


def interest_category(interest: str) -> str | None:
    return INTEREST_CATEGORIES.get(interest)


__all__ = [
    "APPROACHES",
    "EXAMPLE_QUESTIONS",
    "GENERAL_QUESTIONS",
    "INTEREST_CATEGORIES",
    "INTEREST_TEMPLATES",
    "PATRONIZING_PHRASES",
    "QUESTION_FRAMEWORKS",
    "RESPONSE_STRATEGIES",
    "SCENARIO_QUESTIONS",
    "SOCRATIC_TECHNIQUES",
    "framework_for",
    "interest_category",
]
