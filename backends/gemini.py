from __future__ import annotations  # Gemini generateContent wire format

from typing import Any, Dict, List, Optional, Sequence, Tuple

from agents.types import TokenUsage
from config import ProviderRoute
from llm_gateway import LlmGatewayError


def _contents(messages: Sequence[Dict[str, str]]) -> List[Dict[str, Any]]:
    """Fold system text into the first user turn; Gemini only knows user/model roles."""

    system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
    contents: List[Dict[str, Any]] = []
    for message in messages:
        if message["role"] == "system":
            continue
        role = "model" if message["role"] == "assistant" else "user"
        text = message["content"]
        if contents and contents[-1]["role"] == role:
            contents[-1]["parts"].append({"text": text})
        else:
            contents.append({"role": role, "parts": [{"text": text}]})
    if system:
        if contents and contents[0]["role"] == "user":
            contents[0]["parts"].insert(0, {"text": system})
        else:
            contents.insert(0, {"role": "user", "parts": [{"text": system}]})
    return contents


class GeminiWire:  # Translate normalized messages to models/<model>:generateContent
    name = "gemini"

    def build_request(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        cfg: ProviderRoute,
        api_key: Optional[str],
        options: Dict[str, Any],
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
        payload: Dict[str, Any] = {
            "contents": _contents(messages),
            "generationConfig": {
                "temperature": options.get("temperature", cfg.temperature),
                "maxOutputTokens": options.get("max_tokens", cfg.max_tokens),
            },
        }
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["x-goog-api-key"] = api_key
        return f"{cfg.base_url.rstrip('/')}{cfg.endpoint}", payload, headers

    def parse_response(self, data: Any) -> Tuple[str, Optional[TokenUsage]]:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LlmGatewayError("Gemini reply missing candidates[0].content.parts") from exc
        texts = [p.get("text", "") for p in parts if isinstance(p, dict)]
        text = "".join(texts)
        if not text:
            raise LlmGatewayError("Gemini reply had no text parts")
        usage = None
        meta = data.get("usageMetadata")
        if isinstance(meta, dict):
            usage = TokenUsage(
                prompt_tokens=int(meta.get("promptTokenCount") or 0),
                completion_tokens=int(meta.get("candidatesTokenCount") or 0),
                total_tokens=int(meta.get("totalTokenCount") or 0),
            )
        return text, usage


__all__ = ["GeminiWire"]
