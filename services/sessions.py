"""In-process registry of live conversation sessions."""
from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Optional

from agents.conversation import ConversationController, ProfileSource
from backends.base import AiBackend

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps session ids to controllers; one controller per child session.

    At most ``max_sessions`` controllers are held. Creating one more evicts
    the least recently used session.
    """

    def __init__(
        self,
        backend: AiBackend,
        profile_source: Optional[ProfileSource] = None,
        *,
        example_count: int = 3,
        max_sessions: int = 100,
    ) -> None:
        self._backend = backend
        self._profiles = profile_source
        self._example_count = example_count
        self._max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, ConversationController]" = OrderedDict()
        self._lock = threading.Lock()

    def new_session(self) -> ConversationController:
        """Create a controller with a generated session identifier."""

        session_id = str(uuid.uuid4())
        controller = ConversationController(
            self._backend,
            self._profiles,
            session_id=session_id,
            example_count=self._example_count,
        )
        with self._lock:
            self._sessions[session_id] = controller
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Evicted idle session=%s", evicted)
        return controller

    def load_session(self, session_id: str) -> Optional[ConversationController]:
        with self._lock:
            controller = self._sessions.get(session_id)
            if controller is not None:
                self._sessions.move_to_end(session_id)
            return controller

    def get_or_create(self, session_id: Optional[str]) -> ConversationController:
        if session_id:
            controller = self.load_session(session_id)
            if controller is not None:
                return controller
        return self.new_session()

    def discard(self, session_id: str) -> bool:
        """Forget a finished session. Returns False if it was not held."""

        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["SessionRegistry"]
