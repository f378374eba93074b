"""OpenTelemetry wiring for the skill service and the per-dispatch span."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .logging import SERVICE_NAME as DEFAULT_SERVICE_NAME
from .logging import log_json

DISPATCH_SPAN = "forest.dispatch"
ATTRIBUTE_PREFIX = "forest."

_tracer = trace.get_tracer("forest.dispatcher")


def setup_telemetry(*, service_name: str | None = None, service_version: str | None = None) -> None:
    """Install a tracer provider and instrument outbound httpx calls (backend API, ledger RPC, CMS)."""
    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")
    resolved_name = service_name or os.getenv("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME)
    resolved_version = service_version or os.getenv("OTEL_SERVICE_VERSION", "0.1.0")

    provider = TracerProvider(
        resource=Resource(attributes={SERVICE_NAME: resolved_name, SERVICE_VERSION: resolved_version})
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{otlp_endpoint}/v1/traces", timeout=10))
        )
    log_json(
        logging.INFO,
        "telemetry_configured",
        service=resolved_name,
        version=resolved_version,
        otlp_endpoint=otlp_endpoint or None,
    )
    trace.set_tracer_provider(provider)
    HTTPXClientInstrumentor().instrument()


def instrument_fastapi(app) -> None:
    FastAPIInstrumentor.instrument_app(app)


@contextmanager
def dispatch_span(skill_name: str) -> Iterator[trace.Span]:
    with _tracer.start_as_current_span(DISPATCH_SPAN) as span:
        span.set_attribute(f"{ATTRIBUTE_PREFIX}skill", skill_name)
        yield span


def annotate_span(span: trace.Span, **attributes: Any) -> None:
    """Set `forest.<name>` attributes, skipping unset values."""
    for name, value in attributes.items():
        if value is not None:
            span.set_attribute(f"{ATTRIBUTE_PREFIX}{name}", value)


__all__ = ["DISPATCH_SPAN", "annotate_span", "dispatch_span", "instrument_fastapi", "setup_telemetry"]
