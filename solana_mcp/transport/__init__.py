"""Transports: multi-session SSE and single-session stdio."""

from .handler import ConnectionHandler
from .sse import SseTransport, format_sse_event
from .stdio import run_stdio

__all__ = [
    "ConnectionHandler",
    "SseTransport",
    "format_sse_event",
    "run_stdio",
]
