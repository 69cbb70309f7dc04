"""AI provider backends for answering questions and judging replies."""
from __future__ import annotations

import time
from typing import Callable, Dict, Optional

from config import AppConfig, resolve_route
from llm_gateway import HttpClient, WireFormat

from .adapter import GatewayBackend
from .anthropic_messages import AnthropicMessagesWire
from .base import AiBackend, UsageTracker
from .gemini import GeminiWire
from .openai_chat import OpenAIChatWire

WIRES: Dict[str, Callable[[], WireFormat]] = {
    "openai": OpenAIChatWire,
    "anthropic": AnthropicMessagesWire,
    "gemini": GeminiWire,
}


def create_backend(
    cfg: AppConfig,
    provider: Optional[str] = None,
    *,
    client: Optional[HttpClient] = None,
    sleep: Callable[[float], None] = time.sleep,
    max_interests: int = 3,
) -> GatewayBackend:
    """Build the backend for ``provider`` (default: the configured one)."""

    route = resolve_route(cfg, provider)
    wire = WIRES[route.wire]()
    return GatewayBackend(
        route,
        wire,
        evaluation=cfg.evaluation,
        client=client,
        sleep=sleep,
        max_interests=max_interests,
    )


__all__ = [
    "AiBackend",
    "AnthropicMessagesWire",
    "GatewayBackend",
    "GeminiWire",
    "OpenAIChatWire",
    "UsageTracker",
    "WIRES",
    "create_backend",
]
