from __future__ import annotations  # Anthropic messages wire format

from typing import Any, Dict, List, Optional, Sequence, Tuple

from agents.types import TokenUsage
from config import ProviderRoute
from llm_gateway import LlmGatewayError

ANTHROPIC_VERSION = "2023-06-01"


def _split_system(messages: Sequence[Dict[str, str]]) -> Tuple[str, List[Dict[str, str]]]:
    """Pull system messages into one prompt and merge consecutive same-role turns."""

    system_parts: List[str] = []
    turns: List[Dict[str, str]] = []
    for message in messages:
        role = message["role"]
        if role == "system":
            system_parts.append(message["content"])
            continue
        role = "assistant" if role == "assistant" else "user"
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += "\n\n" + message["content"]
        else:
            turns.append({"role": role, "content": message["content"]})
    # The first turn must come from the user.
    if turns and turns[0]["role"] != "user":
        turns.insert(0, {"role": "user", "content": "(conversation continues)"})
    return "\n\n".join(system_parts), turns


class AnthropicMessagesWire:  # Translate normalized messages to /v1/messages
    name = "anthropic"

    def build_request(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        cfg: ProviderRoute,
        api_key: Optional[str],
        options: Dict[str, Any],
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        system, turns = _split_system(messages)
        payload: Dict[str, Any] = {
            "model": cfg.model,
            "max_tokens": options.get("max_tokens", cfg.max_tokens),
            "temperature": options.get("temperature", cfg.temperature),
            "messages": turns,
        }
        if system:
            payload["system"] = system
        headers = {"Content-Type": "application/json", "anthropic-version": ANTHROPIC_VERSION}
        if api_key:
            headers["x-api-key"] = api_key
        return f"{cfg.base_url.rstrip('/')}{cfg.endpoint}", payload, headers

    def parse_response(self, data: Any) -> Tuple[str, Optional[TokenUsage]]:
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            raise LlmGatewayError("Anthropic reply missing content blocks")
        texts = [b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"]
        if not texts:
            raise LlmGatewayError("Anthropic reply had no text blocks")
        usage = None
        raw = data.get("usage")
        if isinstance(raw, dict):
            prompt = int(raw.get("input_tokens") or 0)
            completion = int(raw.get("output_tokens") or 0)
            usage = TokenUsage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion)
        return "".join(texts), usage


__all__ = ["ANTHROPIC_VERSION", "AnthropicMessagesWire"]
