from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    HttpClient,
    HttpResponse,
    LlmGatewayError,
    LlmReply,
    LlmUnavailableError,
    WireFormat,
    chat,
    parse_json,
)

__all__ = [
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "LlmReply",
    "LlmUnavailableError",
    "WireFormat",
    "chat",
    "parse_json",
]
