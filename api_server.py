from __future__ import annotations  # FastAPI server exposing the conversation gate

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from backends import create_backend
from backends.base import AiBackend
from config import load_config
from config.settings import settings
from services.sessions import SessionRegistry
from storage.settings_store import SettingsStore

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def config_path(raw: Optional[str] = None) -> Path:  # Resolve relative config paths against the repo root
    path = Path(raw or settings.APP_CONFIG_PATH)
    return path if path.is_absolute() else ROOT / path


def create_app(
    *,
    backend: Optional[AiBackend] = None,
    store: Optional[SettingsStore] = None,
    provider: Optional[str] = None,
) -> FastAPI:
    """Wire backend, settings store and session registry onto a new app."""

    if backend is None:
        cfg = load_config(config_path())
        backend = create_backend(
            cfg,
            provider or settings.AI_PROVIDER,
            max_interests=settings.MAX_PROMPT_INTERESTS,
        )
    store = store or SettingsStore()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        store.initialize()
        logger.info("Conversation gate ready provider=%s db=%s", getattr(backend, "name", "?"), store.db_path)
        yield

    app = FastAPI(title="Curiosity Gate API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.backend = backend
    app.state.store = store
    app.state.sessions = SessionRegistry(
        backend,
        store,
        example_count=settings.EXAMPLE_QUESTION_COUNT,
        max_sessions=settings.MAX_SESSIONS,
    )
    app.include_router(router)
    return app


__all__ = ["create_app", "config_path"]
