from __future__ import annotations  # OpenAI chat-completions wire format

from typing import Any, Dict, Optional, Sequence, Tuple

from agents.types import TokenUsage
from config import ProviderRoute
from llm_gateway import LlmGatewayError


class OpenAIChatWire:  # Translate normalized messages to /v1/chat/completions
    name = "openai"

    def build_request(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        cfg: ProviderRoute,
        api_key: Optional[str],
        options: Dict[str, Any],
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        payload: Dict[str, Any] = {
            "model": cfg.model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": options.get("temperature", cfg.temperature),
            "max_tokens": options.get("max_tokens", cfg.max_tokens),
        }
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return f"{cfg.base_url.rstrip('/')}{cfg.endpoint}", payload, headers

    def parse_response(self, data: Any) -> Tuple[str, Optional[TokenUsage]]:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LlmGatewayError("OpenAI reply missing choices[0].message.content") from exc
        if not isinstance(content, str):
            raise LlmGatewayError("OpenAI reply content was not text")
        usage = None
        raw = data.get("usage") if isinstance(data, dict) else None
        if isinstance(raw, dict):
            usage = TokenUsage(
                prompt_tokens=int(raw.get("prompt_tokens") or 0),
                completion_tokens=int(raw.get("completion_tokens") or 0),
                total_tokens=int(raw.get("total_tokens") or 0),
            )
        return content, usage


__all__ = ["OpenAIChatWire"]
