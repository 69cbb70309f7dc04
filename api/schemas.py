"""Pydantic schemas for the conversation gate API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from agents.types import HistoryTurn, Stage, TokenUsage, UsageStats


class MessageReq(BaseModel):
    message: str
    session_id: Optional[str] = None
    stage: Optional[Stage] = None
    history: List[HistoryTurn] = Field(default_factory=list)


class MessageResp(BaseModel):
    session_id: str
    message: str
    stage: Stage
    usage: Optional[TokenUsage] = None
    unlock: bool = False
    retry: bool = False
    error: bool = False


class ResetReq(BaseModel):
    session_id: str


class ResetResp(BaseModel):
    session_id: str
    stage: Stage = "question"


class ExamplesResp(BaseModel):
    questions: List[str] = Field(default_factory=list)


class UsageResp(UsageStats):
    provider: str
    emergency_unlocks: int = 0


class EmergencyUnlockReq(BaseModel):
    pin: str


class EmergencyUnlockResp(BaseModel):
    unlocked: bool = True
    emergency_unlocks: int = 0
