"""FastAPI routes exposing the conversation gate to a desktop shell."""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Request

from agents.conversation import ConversationController
from api.schemas import (
    EmergencyUnlockReq,
    EmergencyUnlockResp,
    ExamplesResp,
    MessageReq,
    MessageResp,
    ResetReq,
    ResetResp,
    UsageResp,
)
from observability import log_event
from services.sessions import SessionRegistry
from storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _store(request: Request) -> SettingsStore:
    return request.app.state.store


@router.post("/conversation/message", response_model=MessageResp)
def post_message(req: MessageReq, request: Request) -> MessageResp:
    if not req.message.strip():
        raise HTTPException(status_code=400, detail="Message is required.")
    sessions = _sessions(request)
    controller = sessions.get_or_create(req.session_id)
    result = controller.handle(req.message, stage=req.stage, history=req.history)
    if result.stage == "complete":
        # Unlocked; the shell starts a new session next time.
        sessions.discard(controller.session_id)
    return MessageResp(session_id=controller.session_id, **result.model_dump())


@router.post("/conversation/reset", response_model=ResetResp)
def reset_conversation(req: ResetReq, request: Request) -> ResetResp:
    controller = _sessions(request).load_session(req.session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session not found")
    controller.reset()
    return ResetResp(session_id=controller.session_id)


@router.get("/conversation/examples", response_model=ExamplesResp)
def example_questions(request: Request, count: int = Query(default=3, ge=1, le=10)) -> ExamplesResp:
    controller = ConversationController(request.app.state.backend, _store(request))
    return ExamplesResp(questions=controller.example_questions(count))


@router.get("/usage", response_model=UsageResp)
def usage(request: Request) -> UsageResp:
    backend = request.app.state.backend
    stats = backend.usage_stats()
    return UsageResp(
        provider=backend.name,
        emergency_unlocks=_store(request).get_emergency_unlock_count(),
        **stats.model_dump(),
    )


@router.post("/emergency-unlock", response_model=EmergencyUnlockResp)
def emergency_unlock(req: EmergencyUnlockReq, request: Request) -> EmergencyUnlockResp:
    store = _store(request)
    if not store.verify_pin(req.pin):
        logger.warning("Emergency unlock rejected: bad PIN")
        raise HTTPException(status_code=403, detail="Incorrect PIN")
    store.log_emergency_unlock()
    count = store.get_emergency_unlock_count()
    log_event("emergency_unlock", "parent", outcome="unlocked")
    return EmergencyUnlockResp(emergency_unlocks=count)
