"""Optional OpenTelemetry tracing.

Install the ``otel`` extra to enable. When disabled, every helper is a no-op
so custody and RPC calls can be wrapped unconditionally.

Usage:
    setup_telemetry(enabled=settings.otel_enabled)

    with traced_operation("custody.sign_transaction", {"wallet.id": wallet_id}):
        result = await client.sign_transaction(...)
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI
    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

_initialized = False
_tracer: Tracer | None = None


def setup_telemetry(
    service_name: str = "solana-agent-mcp",
    endpoint: str | None = None,
    enabled: bool = False,
) -> Tracer | None:
    """Configure OpenTelemetry tracing.

    Safe to call multiple times; later calls return the existing tracer.

    Args:
        service_name: Name for this service in traces.
        endpoint: OTLP collector endpoint. None uses the console exporter.
        enabled: Whether to enable telemetry.

    Returns:
        Configured tracer, or None if disabled or dependencies missing.
    """
    global _initialized, _tracer

    if not enabled:
        logger.debug("Telemetry disabled")
        return None

    if _initialized:
        return _tracer

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import SERVICE_NAME, Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
        )
    except ImportError:
        logger.warning(
            "OpenTelemetry not installed. Install with: pip install 'solana-agent-mcp[otel]'"
        )
        return None

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))

    if endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )

        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        logger.info(f"OTLP exporter configured: {endpoint}")
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console span exporter configured (no endpoint specified)")

    trace.set_tracer_provider(provider)

    try:
        from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

        HTTPXClientInstrumentor().instrument()
    except ImportError:
        logger.debug("HTTPX instrumentation not installed")

    _tracer = trace.get_tracer(__name__)
    _initialized = True
    logger.info(f"OpenTelemetry initialized for service: {service_name}")
    return _tracer


def instrument_fastapi(app: FastAPI) -> None:
    """Instrument a FastAPI app for request tracing, if telemetry is on."""
    if not _initialized:
        return

    try:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)
    except ImportError:
        logger.warning("FastAPI instrumentation not available")


@contextmanager
def traced_operation(
    name: str,
    attributes: dict[str, str] | None = None,
) -> Generator[Span | None, None, None]:
    """Trace an operation as a span, or yield None when disabled.

    Args:
        name: Span name.
        attributes: Optional attributes to attach to the span.
    """
    if not _tracer:
        yield None
        return

    with _tracer.start_as_current_span(name) as span:
        if attributes:
            for k, v in attributes.items():
                span.set_attribute(k, v)
        yield span


def shutdown_telemetry() -> None:
    """Flush pending spans and reset module state."""
    global _initialized, _tracer

    if not _initialized:
        return

    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    shutdown_fn = getattr(provider, "shutdown", None)
    if shutdown_fn is not None:
        shutdown_fn()
        logger.info("Telemetry shutdown complete")

    _initialized = False
    _tracer = None
