"""Web session spans.

Every browser session gets one long-lived OpenTelemetry span. Requests run
inside it, so their logs and child spans share the session's trace id.
Discovery milestones are added to it as span events.

Spans are ended explicitly on reset, or by an idle sweep that runs each time
a new session span is opened.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from opentelemetry.trace import Span, SpanKind

from workflow_pricing.core.config import get_session_span_idle_seconds
from workflow_pricing.shared.tracing import get_tracer

logger = logging.getLogger(__name__)


@dataclass
class _TrackedSpan:
    span: Span
    opened_at: float
    last_used: float
    events: int = 0


_SESSION_SPANS: Dict[str, _TrackedSpan] = {}


def get_or_create_session_span(
    session_id: str,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> Span:
    """Return the session's span, opening one (and sweeping idle ones) if needed."""
    now = clock()
    tracked = _SESSION_SPANS.get(session_id)
    if tracked is not None:
        tracked.last_used = now
        return tracked.span

    expire_idle_sessions(now=now)

    tracer = get_tracer(instrumenting_module_name="workflow_pricing.session")
    span = tracer.start_span(
        name="session.web",
        kind=SpanKind.SERVER,
        attributes={"session.id": session_id, "session.type": "web"},
    )
    _SESSION_SPANS[session_id] = _TrackedSpan(span=span, opened_at=now, last_used=now)
    return span


def record_session_event(session_id: str, name: str, **attributes: Any) -> None:
    """Attach a milestone (turn, scenario, estimate) to an open session span."""
    tracked = _SESSION_SPANS.get(session_id)
    if tracked is None:
        return
    tracked.events += 1
    tracked.span.add_event(name, attributes={k: v for k, v in attributes.items() if v is not None})


def end_session_span(session_id: str, reason: str = "reset") -> None:
    tracked = _SESSION_SPANS.pop(session_id, None)
    if tracked is None:
        return
    tracked.span.set_attribute("session.end_reason", reason)
    tracked.span.set_attribute("session.events", tracked.events)
    tracked.span.end()


def expire_idle_sessions(
    max_idle_seconds: Optional[float] = None,
    *,
    now: Optional[float] = None,
) -> List[str]:
    """End spans unused for longer than ``max_idle_seconds``; returns their session ids."""
    if max_idle_seconds is None:
        max_idle_seconds = get_session_span_idle_seconds()
    if now is None:
        now = time.monotonic()

    expired = [
        session_id
        for session_id, tracked in _SESSION_SPANS.items()
        if now - tracked.last_used > max_idle_seconds
    ]
    for session_id in expired:
        end_session_span(session_id, reason="idle")
    if expired:
        logger.debug(f"Ended {len(expired)} idle session span(s)")
    return expired


def active_session_count() -> int:
    return len(_SESSION_SPANS)
