"""OpenTelemetry metrics for the Workflow Pricing Assistant.

Instruments:
- discovery_turns_total: answered discovery questions
- estimates_generated_total: estimates by workload source and outcome
- estimate_monthly_credits: distribution of estimated monthly credits
- errors_total: errors by type

Every recorder is a no-op until configure_metrics() runs with ENABLE_OTEL=true.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

from .logging import get_otlp_endpoint, parse_otlp_headers

logger = logging.getLogger(__name__)

EXPORT_INTERVAL_MILLIS = 5000

_METRICS_CONFIGURED = False
_meter: Optional[metrics.Meter] = None
_discovery_turns_counter = None
_estimates_counter = None
_monthly_credits_histogram = None
_errors_counter = None


def _metrics_endpoint() -> str:
    endpoint = (get_otlp_endpoint() or "http://localhost:4317").rstrip("/")
    if not endpoint.startswith(("http://", "https://")):
        endpoint = f"http://{endpoint}"
    return endpoint


def configure_metrics() -> None:
    """Install a MeterProvider exporting to OTLP and create the instruments, once."""
    global _METRICS_CONFIGURED, _meter
    global _discovery_turns_counter, _estimates_counter, _monthly_credits_histogram, _errors_counter

    if _METRICS_CONFIGURED:
        return

    if os.getenv("ENABLE_OTEL", "").lower() != "true":
        logger.debug("Metrics disabled (ENABLE_OTEL not set to true)")
        _METRICS_CONFIGURED = True
        return

    try:
        endpoint = _metrics_endpoint()
        logger.info(f"Configuring metrics export to OTLP endpoint: {endpoint}")

        exporter = OTLPMetricExporter(
            endpoint=endpoint,
            headers=parse_otlp_headers(
                os.getenv("OTLP_HEADERS") or os.getenv("OTEL_EXPORTER_OTLP_HEADERS")
            ),
            insecure=endpoint.startswith("http://"),
        )
        reader = PeriodicExportingMetricReader(exporter, export_interval_millis=EXPORT_INTERVAL_MILLIS)
        metrics.set_meter_provider(MeterProvider(metric_readers=[reader]))

        _meter = metrics.get_meter("workflow_pricing")
        _discovery_turns_counter = _meter.create_counter(
            name="discovery_turns_total",
            description="Discovery answers processed",
            unit="1",
        )
        _estimates_counter = _meter.create_counter(
            name="estimates_generated_total",
            description="Cost estimates requested, by workload source and outcome",
            unit="1",
        )
        _errors_counter = _meter.create_counter(
            name="errors_total",
            description="Errors by type",
            unit="1",
        )
        _monthly_credits_histogram = _meter.create_histogram(
            name="estimate_monthly_credits",
            description="Estimated monthly credits per successful estimate",
            unit="credits",
        )

        logger.info("OpenTelemetry metrics configured successfully")
    except Exception as e:
        # Metrics are optional; the app keeps serving without them.
        logger.warning(f"Failed to configure metrics: {e}")
    _METRICS_CONFIGURED = True


def increment_discovery_turns(session_id: str) -> None:
    if _discovery_turns_counter:
        _discovery_turns_counter.add(1, {"session_id": session_id})


def increment_estimates_generated(source: str, success: bool = True) -> None:
    """
    Count an estimate request.

    Args:
        source: Where the workload came from ('discovery', 'scenario', 'direct')
        success: Whether the estimate was produced
    """
    if _estimates_counter:
        _estimates_counter.add(1, {"source": source, "success": str(success)})


def record_estimate_credits(source: str, monthly_credits: float) -> None:
    """Record the monthly credits of a produced estimate."""
    if _monthly_credits_histogram:
        _monthly_credits_histogram.record(monthly_credits, {"source": source})


def increment_errors(error_type: str, session_id: Optional[str] = None) -> None:
    """
    Count an error.

    Args:
        error_type: Category such as 'precondition_violation' or 'configuration_error'
        session_id: Optional session identifier for attribution
    """
    if _errors_counter:
        attributes = {"error_type": error_type}
        if session_id:
            attributes["session_id"] = session_id
        _errors_counter.add(1, attributes)
