"""Tracing for the prestige API and the daily rollup worker.

Spans go to an OTLP collector when ``otel_exporter_endpoint`` is set and are
printed to stdout otherwise. Vote recording opens its own span so retries
after rating conflicts show up under the request that caused them.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Span

try:  # pragma: no cover - the OTLP exporter ships in the optional ``otlp`` extra
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
except ModuleNotFoundError:  # pragma: no cover
    OTLPSpanExporter = None  # type: ignore[assignment]

SERVICE_NAME_ATTRIBUTE = "service.name"
TRACER_NAME = "prestige"


def _span_processor(endpoint: str | None) -> SpanProcessor:
    if endpoint and OTLPSpanExporter is not None:
        return BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))
    return SimpleSpanProcessor(ConsoleSpanExporter())


def _configured_service() -> str | None:
    provider = trace.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        return None
    return provider.resource.attributes.get(SERVICE_NAME_ATTRIBUTE)


def initialise_tracing(
    *,
    service_name: str,
    endpoint: str | None = None,
    instrument_logging: bool = True,
) -> None:
    """Install the process-wide tracer provider for ``service_name``.

    The API and the rollup worker each call this at start-up; a second call
    for the same service leaves the installed provider alone.
    """

    if _configured_service() == service_name:
        return

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME_ATTRIBUTE: service_name}))
    provider.add_span_processor(_span_processor(endpoint))
    trace.set_tracer_provider(provider)
    if instrument_logging:
        LoggingInstrumentor().instrument(set_logging_format=True)


def instrument_fastapi_app(app: FastAPI) -> None:
    FastAPIInstrumentor().instrument_app(app)


def instrument_sqlalchemy_engine(engine: Any) -> None:
    SQLAlchemyInstrumentor().instrument(engine=engine)


@contextmanager
def traced_span(name: str, **attributes: Any) -> Iterator[Span]:
    """Open ``name`` as a child of the current span, e.g. ``votes.record``.

    ``None`` attributes are dropped; OpenTelemetry only accepts primitive
    values.
    """

    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        yield span


__all__ = [
    "SERVICE_NAME_ATTRIBUTE",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "traced_span",
]
