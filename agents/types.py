"""Shared type definitions for agents."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

AgeBand = Literal["young", "middle", "teen"]
Stage = Literal["question", "understanding", "complete"]
Topic = Literal["science", "nature", "technology", "space", "history", "art", "social", "philosophy", "general"]
EngagementLevel = Literal["low", "medium", "high"]
ComplexityLevel = Literal["simple", "developing", "complex"]


class ChildProfile(BaseModel):
    age: Optional[int] = None
    gender: Optional[str] = None
    interests: List[str] = Field(default_factory=list)


class HistoryTurn(BaseModel):
    user: str
    ai: str


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    estimated_cost: float = 0.0


class AnswerResult(BaseModel):
    text: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    is_nonsense: bool = False
    is_fallback: bool = False


class Evaluation(BaseModel):
    understood: bool
    feedback: str = ""
    suggestion: Optional[str] = None


class UsageStats(BaseModel):
    total_tokens: int = 0
    conversation_count: int = 0
    estimated_cost: float = 0.0
    average_tokens_per_conversation: float = 0.0
    cost_per_conversation: float = 0.0


class ConversationState(BaseModel):
    stage: Stage = "question"
    pending_question: Optional[str] = None
    pending_answer: Optional[str] = None


class TurnResult(BaseModel):
    message: str
    stage: Stage
    usage: Optional[TokenUsage] = None
    unlock: bool = False
    retry: bool = False
    error: bool = False
