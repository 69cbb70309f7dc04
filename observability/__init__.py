"""Observability utilities for the conversation gate."""
from .logger import log_event
from .tracing import span

__all__ = ["log_event", "span"]
