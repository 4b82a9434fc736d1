"""OpenTelemetry initialization and span helpers for the combs-of-honey service."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

logger = logging.getLogger(__name__)

TRACER_NAME = "combs_of_honey"

# Provider installed by init_telemetry(); None while tracing is a no-op.
_tracer_provider: TracerProvider | None = None


def init_telemetry(service_name: str, endpoint: str = "") -> trace.Tracer:
    """
    Initialize OpenTelemetry tracing for the service.

    When ``endpoint`` is set, installs a TracerProvider with a batch span
    processor and an OTLP gRPC exporter, and registers the W3C trace-context
    and baggage propagators so incoming ``traceparent`` headers continue the
    caller's trace. Without an endpoint the global no-op tracer is used.

    Calling it again after a provider has been installed reuses that
    provider.

    Args:
        service_name: ``service.name`` resource attribute (e.g. "combs-of-honey")
        endpoint: OTLP gRPC collector endpoint, e.g. "http://localhost:4317"

    Returns:
        A Tracer instance (real or no-op depending on config)
    """
    global _tracer_provider

    set_global_textmap(
        CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
    )

    if not endpoint:
        logger.info("OTEL_EXPORTER_OTLP_ENDPOINT not set, using no-op tracer")
        return trace.get_tracer(TRACER_NAME)

    if _tracer_provider is not None:
        logger.debug("TracerProvider already initialized; reusing it")
        return trace.get_tracer(TRACER_NAME)

    # Import exporter only when needed
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider
    logger.info("Telemetry initialized: endpoint=%s", endpoint)

    return trace.get_tracer(TRACER_NAME)


def shutdown_telemetry() -> None:
    """Flush pending spans and shut the provider down (no-op if never installed)."""
    global _tracer_provider

    if _tracer_provider is None:
        return
    _tracer_provider.shutdown()
    _tracer_provider = None


@contextmanager
def db_span(statement: str) -> Iterator[trace.Span]:
    """Open a ``db-call`` child span around one persistence call.

    The statement text is recorded as ``db.statement``. An exception raised
    inside the block is recorded on the span, which is marked ERROR, and
    then re-raised.

    Usage::

        stmt = select(Comb).where(Comb.id == comb_id)
        with db_span(str(stmt)):
            result = await db.execute(stmt)
    """
    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span("db-call") as span:
        span.set_attribute("db.statement", statement)
        yield span
