"""Tracing for the document generation service.

Spans cover each request stage (``docgen.*``). Export goes to the OTLP
collector named by ``OTEL_EXPORTER_OTLP_ENDPOINT``, to the console when
``LOG_LEVEL=DEBUG``, and nowhere otherwise.
"""

from __future__ import annotations

import logging

from opentelemetry import trace
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from docgen_service.config import config

logger = logging.getLogger(__name__)

SERVICE_NAME = "docgen-service"

_provider: TracerProvider | None = None


def _span_exporter() -> SpanExporter | None:
    if not config.otel_endpoint:
        return ConsoleSpanExporter() if config.log_level.upper() == "DEBUG" else None
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError:
        logger.warning("otlp extra not installed, spans for %s go to the console", config.otel_endpoint)
        return ConsoleSpanExporter()
    logger.info("Exporting spans to %s", config.otel_endpoint)
    return OTLPSpanExporter(endpoint=config.otel_endpoint)


def init_telemetry() -> trace.Tracer:
    """Install the tracer provider once; later calls reuse it."""
    global _provider
    if _provider is None:
        _provider = TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
        exporter = _span_exporter()
        if exporter is not None:
            _provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(_provider)
        set_global_textmap(TraceContextTextMapPropagator())
    return trace.get_tracer(SERVICE_NAME)


def get_tracer() -> trace.Tracer:
    if _provider is None:
        return init_telemetry()
    return trace.get_tracer(SERVICE_NAME)


def trace_id_of(span: trace.Span) -> str:
    """Hex trace id as printed by collectors and echoed in audit events."""
    return format(span.get_span_context().trace_id, "032x")


def flush_telemetry() -> None:
    """Push buffered spans out before the process exits."""
    if _provider is not None:
        _provider.force_flush()
