"""OpenTelemetry tracing for gateway requests."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

from sheet_gateway import __version__
from sheet_gateway.infrastructure.config import ObservabilityConfig

TRACER_NAME = "sheet_gateway"

_tracer: trace.Tracer | None = None


def setup_tracing(
    observability: ObservabilityConfig,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a tracer provider that exports gateway spans.

    Spans go to the OTLP collector named by ``observability.otel_endpoint``
    when one is configured, and to stdout when ``console_export`` is set.

    Args:
        observability: Observability section of the gateway config
        console_export: Also print finished spans (for debugging)

    Returns:
        The gateway tracer
    """
    global _tracer

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": observability.otel_service_name,
                "service.version": __version__,
            }
        )
    )
    if observability.otel_endpoint:
        exporter = OTLPSpanExporter(endpoint=observability.otel_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = provider.get_tracer(TRACER_NAME, __version__)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Return the gateway tracer (a no-op tracer until tracing is set up)."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME, __version__)
    return _tracer


@contextmanager
def request_span(
    action: str,
    sheet: str | None,
    tracer: trace.Tracer | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Open a ``gateway.<action>`` span for one dispatched request.

    The collection name is attached only when the request names one.

    Args:
        action: Requested action, as sent by the client
        sheet: Target collection, if any
        tracer: Tracer to use instead of the gateway tracer

    Yields:
        The open span
    """
    tracer = tracer or get_tracer()
    with tracer.start_as_current_span(f"gateway.{action}") as span:
        span.set_attribute("gateway.action", action)
        if sheet:
            span.set_attribute("gateway.sheet", sheet)
        yield span


def mark_failed(span: trace.Span, error: str) -> None:
    """Flag ``span`` as a failed request carrying ``error``."""
    span.set_attribute("gateway.status", "error")
    span.set_status(Status(StatusCode.ERROR, error))
