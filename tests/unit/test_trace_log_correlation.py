import logging
import os
from unittest.mock import MagicMock, patch

from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags, use_span

import workflow_pricing.shared.tracing as tracing_module
from workflow_pricing.shared.logging import TraceContextFilter, parse_otlp_headers, resolve_log_level


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_trace_context_filter_sets_ids_when_span_active() -> None:
    filter_ = TraceContextFilter()

    span_context = SpanContext(
        trace_id=int("1" * 32, 16),
        span_id=int("2" * 16, 16),
        is_remote=False,
        trace_flags=TraceFlags(TraceFlags.SAMPLED),
        trace_state={},
    )
    record = _record()

    with use_span(NonRecordingSpan(span_context), end_on_exit=False):
        assert filter_.filter(record) is True

    assert record.trace_id == "1" * 32
    assert record.span_id == "2" * 16


def test_trace_context_filter_sets_placeholders_when_no_span() -> None:
    record = _record()

    assert TraceContextFilter().filter(record) is True
    assert record.trace_id == "-"
    assert record.span_id == "-"


def test_parse_otlp_headers() -> None:
    assert parse_otlp_headers("api-key=abc, tenant = t1,broken") == {"api-key": "abc", "tenant": "t1"}
    assert parse_otlp_headers(None) == {}


def test_resolve_log_level() -> None:
    with patch.dict(os.environ, {"APP_LOG_LEVEL": "debug"}):
        assert resolve_log_level() == logging.DEBUG
    with patch.dict(os.environ, {"APP_LOG_LEVEL": "chatty"}):
        assert resolve_log_level() == logging.INFO


def test_configure_tracing_disabled_keeps_noop_provider() -> None:
    tracing_module._TRACING_CONFIGURED = False
    with patch.dict(os.environ, {"ENABLE_OTEL": "false"}), patch.object(
        tracing_module.trace, "set_tracer_provider"
    ) as mock_set_provider:
        tracing_module.configure_tracing("test-service")
        mock_set_provider.assert_not_called()
    tracing_module._TRACING_CONFIGURED = False


def test_configure_tracing_enabled_installs_exporter() -> None:
    tracing_module._TRACING_CONFIGURED = False
    env = {"ENABLE_OTEL": "true", "OTLP_ENDPOINT": "http://collector:4317/"}
    with patch.dict(os.environ, env), patch.object(
        tracing_module, "OTLPSpanExporter"
    ) as mock_exporter_class, patch.object(
        tracing_module, "BatchSpanProcessor", return_value=MagicMock()
    ), patch.object(tracing_module.trace, "set_tracer_provider") as mock_set_provider:
        tracing_module.configure_tracing("test-service")
        tracing_module.configure_tracing("test-service")

        mock_exporter_class.assert_called_once()
        assert mock_exporter_class.call_args.kwargs["endpoint"] == "http://collector:4317"
        assert mock_exporter_class.call_args.kwargs["insecure"] is True
        mock_set_provider.assert_called_once()
    tracing_module._TRACING_CONFIGURED = False
