"""Tracing/observability setup utilities.

Spans are created with the OpenTelemetry API everywhere (`get_tracer`). When
ENABLE_OTEL is not "true" the API stays on its no-op provider, so spans cost
nothing and nothing is exported.
"""

from __future__ import annotations

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .logging import get_otlp_endpoint, parse_otlp_headers

logger = logging.getLogger(__name__)

_TRACING_CONFIGURED = False


def otel_enabled() -> bool:
    return os.getenv("ENABLE_OTEL", "").lower() == "true"


def configure_tracing(service_name: str) -> None:
    """Install an OTLP-exporting TracerProvider once, if ENABLE_OTEL=true."""

    global _TRACING_CONFIGURED
    if _TRACING_CONFIGURED:
        return

    if not otel_enabled():
        logger.debug("Tracing disabled (ENABLE_OTEL not set to true)")
        _TRACING_CONFIGURED = True
        return

    if not os.getenv("OTEL_SERVICE_NAME"):
        os.environ["OTEL_SERVICE_NAME"] = service_name

    endpoint = (get_otlp_endpoint() or "http://localhost:4317").rstrip("/")
    headers = parse_otlp_headers(
        os.getenv("OTLP_HEADERS") or os.getenv("OTEL_EXPORTER_OTLP_HEADERS")
    )

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=endpoint,
                headers=headers,
                insecure=endpoint.startswith("http://"),
            )
        )
    )
    trace.set_tracer_provider(provider)
    logger.info(f"Configuring trace export to OTLP endpoint: {endpoint}")
    _TRACING_CONFIGURED = True


def get_tracer(instrumenting_module_name: str) -> trace.Tracer:
    return trace.get_tracer(instrumenting_module_name)
