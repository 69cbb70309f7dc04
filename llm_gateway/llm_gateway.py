from __future__ import annotations  # LLM request gateway module

import json
import logging
import os
import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from agents.types import TokenUsage
from config import ProviderRoute


logger = logging.getLogger(__name__)  # Module logger setup


_ROUTE_LOCKS: Dict[str, threading.Lock] = {}
_ROUTE_LOCKS_GUARD = threading.Lock()

RETRYABLE_STATUS = frozenset({408, 429})


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class WireFormat(Protocol):  # Provider-specific request/response translation
    def build_request(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        cfg: ProviderRoute,
        api_key: Optional[str],
        options: Dict[str, Any],
    ) -> Tuple[str, Dict[str, Any], Dict[str, str]]: ...

    def parse_response(self, data: Any) -> Tuple[str, Optional[TokenUsage]]: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class LlmUnavailableError(LlmGatewayError):  # Retries exhausted on transient failures
    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class _TransientError(Exception):  # Internal marker for retryable attempts
    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class LlmReply(BaseModel):  # Normalized provider reply
    text: str
    usage: Optional[TokenUsage] = None
    attempts: int = 1


T = TypeVar("T", bound=BaseModel)


def _lock_for(cfg: ProviderRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _ROUTE_LOCKS_GUARD:
        lock = _ROUTE_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _ROUTE_LOCKS[key] = lock
    return lock


def chat(
    messages: Sequence[Dict[str, str]],
    *,
    wire: WireFormat,
    cfg: ProviderRoute,
    schema: Optional[Type[BaseModel]] = None,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
    timeout_s: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> LlmReply:
    """Send ``messages`` to the route and return the normalized reply.

    Transient failures (transport errors, 408/429/5xx, unreadable payloads) are
    retried sequentially with linear backoff. When ``schema`` is given the reply
    text must validate against it; validation failures are retried with a
    corrective hint. Exhausted retries raise :class:`LlmUnavailableError`; other
    4xx statuses raise :class:`LlmGatewayError` immediately.
    """

    def _execute() -> LlmReply:
        base_messages = _normalize_messages(messages)
        if schema is not None:
            schema_json = json.dumps(schema.model_json_schema(), indent=2)
            base_messages.insert(
                0,
                {"role": "system", "content": "Reply with a single JSON object matching this schema:\n" + schema_json},
            )
        attempts = cfg.max_retries + 1
        timeout = timeout_s if timeout_s is not None else cfg.timeout_s
        api_key = os.getenv(cfg.api_key_env) if cfg.api_key_env else None
        last_error: Optional[Exception] = None
        last_status: Optional[int] = None
        last_error_text: Optional[str] = None
        usage_total: Optional[TokenUsage] = None
        preview = _preview(base_messages)
        if len(preview) > 120:
            preview = preview[:117] + "..."
        logger.info(
            "LLM request start route=%s model=%s attempts=%d preview=%s",
            cfg.name,
            cfg.model,
            attempts,
            preview,
        )
        for attempt in range(attempts):
            if attempt > 0:
                delay = cfg.backoff_s * attempt
                if delay > 0:
                    logger.info("LLM retry backoff route=%s delay=%.1fs", cfg.name, delay)
                    sleep(delay)
            attempt_messages = list(base_messages)
            if attempt > 0 and last_error_text and schema is not None:
                attempt_messages.append({"role": "system", "content": _retry_hint(last_error_text)})
            url, payload, headers = wire.build_request(
                attempt_messages,
                cfg=cfg,
                api_key=api_key,
                options=dict(options or {}),
            )
            headers.update(cfg.extra_headers)
            logger.info(
                "LLM request send route=%s model=%s attempt=%d/%d",
                cfg.name,
                cfg.model,
                attempt + 1,
                attempts,
            )
            try:
                text, usage = _attempt(url, payload, headers, timeout, client, wire)
            except _TransientError as exc:
                logger.warning(
                    "LLM attempt failed route=%s attempt=%d/%d: %s",
                    cfg.name,
                    attempt + 1,
                    attempts,
                    exc,
                )
                last_error = exc
                last_status = exc.status
                last_error_text = None
                continue
            usage_total = _merge_usage(usage_total, usage)
            if schema is not None:
                try:
                    _validate(schema, text)
                except (json.JSONDecodeError, ValidationError) as exc:
                    logger.warning("LLM output validation failed route=%s: %s", cfg.name, exc)
                    last_error = exc
                    last_status = None
                    last_error_text = str(exc)
                    continue
            logger.info(
                "LLM request done route=%s model=%s attempt=%d",
                cfg.name,
                cfg.model,
                attempt + 1,
            )
            return LlmReply(text=text, usage=usage_total, attempts=attempt + 1)
        raise LlmUnavailableError(
            f"LLM route '{cfg.name}' failed after {attempts} attempts",
            status=last_status,
        ) from last_error

    if cfg.sequential:
        lock = _lock_for(cfg)
        with lock:
            return _execute()
    return _execute()


def parse_json(schema: Type[T], content: str) -> T:  # Parse a JSON reply into ``schema``
    return _validate(schema, content)


def _attempt(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout: float,
    client: Optional[HttpClient],
    wire: WireFormat,
) -> Tuple[str, Optional[TokenUsage]]:  # Run one HTTP attempt, classifying failures
    try:
        response, close_cb = _post(url, payload, headers, timeout, client)
    except Exception as exc:  # noqa: BLE001
        raise _TransientError(f"transport failure: {exc}") from exc
    try:
        status = response.status_code
        if status in RETRYABLE_STATUS or status >= 500:
            raise _TransientError(f"status {status}", status=status)
        if status >= 400:
            logger.error("LLM error status: %s", status)
            raise LlmGatewayError(f"LLM returned status {status}")
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            raise _TransientError("payload was not JSON") from exc
        try:
            return wire.parse_response(data)
        except LlmGatewayError as exc:
            raise _TransientError(str(exc)) from exc
    finally:
        _close_safely(close_cb)


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        response = client.post(url, json=payload, headers=headers, timeout=timeout)
        return response, None
    import httpx

    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _normalize_messages(messages: Sequence[Dict[str, str]]) -> list[Dict[str, str]]:  # Ensure message payload shape
    normalized: list[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = str(item.get("content", ""))
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in reversed(messages):
        text = message.get("content", "").strip()
        if text:
            return text.splitlines()[-1]
    return ""


def _merge_usage(total: Optional[TokenUsage], usage: Optional[TokenUsage]) -> Optional[TokenUsage]:  # Sum usage across attempts
    if usage is None:
        return total
    if total is None:
        return usage
    return TokenUsage(
        prompt_tokens=total.prompt_tokens + usage.prompt_tokens,
        completion_tokens=total.completion_tokens + usage.completion_tokens,
        total_tokens=total.total_tokens + usage.total_tokens,
    )


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    cleaned = _strip_code_fences(content)
    return schema.model_validate_json(cleaned)


def _strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text


def _retry_hint(error_text: Optional[str]) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    return base + " Return a single JSON object that matches the schema."
