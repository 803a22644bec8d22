"""Observability: logging and optional tracing."""

from .logging import SessionLoggerAdapter, setup_logging
from .telemetry import (
    instrument_fastapi,
    setup_telemetry,
    shutdown_telemetry,
    traced_operation,
)

__all__ = [
    # Logging
    "SessionLoggerAdapter",
    "setup_logging",
    # Telemetry
    "instrument_fastapi",
    "setup_telemetry",
    "shutdown_telemetry",
    "traced_operation",
]
