"""Shared orchestration helpers for CLI and web interfaces."""

import inspect
import logging
import math
from typing import Any, Dict, List, Optional

from opentelemetry.trace import SpanKind

from workflow_pricing.shared.errors import PreconditionViolation, SessionError
from workflow_pricing.shared.formatting import DEFAULT_CREDIT_PRICE, credits_to_currency
from workflow_pricing.shared.metrics import (
    increment_discovery_turns,
    increment_errors,
    increment_estimates_generated,
    record_estimate_credits,
)
from workflow_pricing.shared.tracing import get_tracer
from .catalog import PricingCatalog
from .conversation import (
    Question,
    QuestionKind,
    generate_workflow_summary,
    get_next_question,
    initialize_conversation,
    is_complete,
    process_response,
    to_workload,
)
from .cost_engine import complete_breakdown
from .models import SessionData, WorkloadDescription
from .projections import forecast_monthly, project_bands
from .scenarios import MessageCallback, ScenarioPlayer, get_scenario_by_id
from .session import InMemorySessionStore

logger = logging.getLogger(__name__)


def _stage_span(stage_name: str, *, session_id: Optional[str] = None, **attrs: Any):
    """Create a traced span for a workflow stage with shared attributes."""
    tracer = get_tracer(instrumenting_module_name="workflow_pricing.stages")
    attributes: Dict[str, Any] = {
        "workflow.stage": stage_name,
        **attrs,
    }
    if session_id:
        attributes["session.id"] = session_id
    return tracer.start_as_current_span(
        name=f"stage.{stage_name.lower().replace(' ', '_')}",
        kind=SpanKind.INTERNAL,
        attributes=attributes,
    )


def _answer_text(answer: Any) -> str:
    if isinstance(answer, (list, tuple)):
        return ", ".join(str(item) for item in answer)
    return "" if answer is None else str(answer)


def _turn_result(session_data: SessionData) -> Dict[str, Any]:
    """Shape the current discovery position for interfaces."""
    state = session_data.state
    question = get_next_question(state)
    done = question is None
    return {
        "question": question.to_dict() if question else None,
        "step": state.current_step,
        "is_done": done,
        "summary": generate_workflow_summary(state.extracted_data) if done else None,
        "extracted_data": state.extracted_data.to_dict(),
        "history": session_data.history,
    }


def _check_answer(question: Question, answer: Any) -> None:
    """Reject an answer whose shape the question's extraction cannot take."""
    if question.kind is QuestionKind.MULTI_CHOICE:
        valid = isinstance(answer, str) or (
            isinstance(answer, (list, tuple)) and all(isinstance(item, str) for item in answer)
        )
        expected = "an option label or a list of option labels"
    elif question.kind is QuestionKind.NUMBER:
        valid = isinstance(answer, str) or (
            isinstance(answer, (int, float))
            and not isinstance(answer, bool)
            and math.isfinite(answer)
        )
        expected = "a finite number or text"
    else:
        valid = isinstance(answer, str)
        expected = "text"
    if not valid:
        raise PreconditionViolation(
            f"Answer to '{question.id}' must be {expected}, got {type(answer).__name__}"
        )


def start_discovery(
    session_store: InMemorySessionStore,
    session_id: str,
    model: str,
) -> Dict[str, Any]:
    """
    Return the current discovery position, creating the session if needed.

    An existing session is left as-is so a page reload resumes where it was.
    """
    with session_store.lock(session_id):
        session_data = session_store.get(session_id)
        if session_data is None:
            session_data = SessionData(state=initialize_conversation(), history=[], model=model)
            question = get_next_question(session_data.state)
            session_data.history.append({"role": "assistant", "content": question.prompt})
            session_store.set(session_id, session_data)
            logger.info(f"Started discovery for session {session_id} (model={model})")
        return _turn_result(session_data)


def run_discovery_turn(
    session_store: InMemorySessionStore,
    session_id: str,
    answer: Any,
) -> Dict[str, Any]:
    """Apply one answer to the session's discovery state and persist the new state.

    Turns on the same session are serialized by the store's session lock. The
    session is only written once the answer has been applied, so a rejected
    answer leaves both state and history untouched.

    Args:
        session_store: Session store
        session_id: Session identifier
        answer: Answer to the current question (text, option label, list of labels or number)

    Returns:
        Dict with question, step, is_done, summary, extracted_data and history

    Raises:
        SessionError: If the session has not been started.
        PreconditionViolation: If the answer's shape does not fit the current question.
    """
    with _stage_span("Discovery turn", session_id=session_id), session_store.lock(session_id):
        session_data = session_store.get(session_id)
        if session_data is None:
            raise SessionError(f"No active session '{session_id}'. Start discovery first.")

        question = get_next_question(session_data.state)
        if question is None:
            logger.debug(f"Discovery already complete for {session_id}; answer ignored")
            return _turn_result(session_data)

        _check_answer(question, answer)
        state = process_response(answer, session_data.state)
        next_question = get_next_question(state)
        if next_question is not None:
            reply = next_question.prompt
        else:
            reply = generate_workflow_summary(state.extracted_data)

        session_data.state = state
        session_data.history.append({"role": "user", "content": _answer_text(answer)})
        session_data.history.append({"role": "assistant", "content": reply})
        session_store.set(session_id, session_data)

        if next_question is None:
            logger.info(f"Discovery complete for session {session_id}")
        increment_discovery_turns(session_id)
        return _turn_result(session_data)


def estimate_workload(
    workload: WorkloadDescription,
    catalog: PricingCatalog,
    credit_price: float = DEFAULT_CREDIT_PRICE,
) -> Dict[str, Any]:
    """
    Price a workload: breakdown, volume bands, 12-month forecast and USD figures.

    Raises:
        PreconditionViolation: If the workload fails validation.
        ConfigurationError: If the catalog cannot price the workload's model.
    """
    with _stage_span(
        "Estimate",
        model=workload.model,
        transactions_per_month=workload.transactions_per_month,
    ):
        breakdown = complete_breakdown(workload, catalog)
        return {
            "model": workload.model,
            "transactions_per_month": workload.transactions_per_month,
            "breakdown": breakdown.to_dict(),
            "bands": [band.to_dict() for band in project_bands(breakdown)],
            "forecast": forecast_monthly(breakdown.monthly_credits),
            "usd": {
                "credits_per_transaction": credits_to_currency(
                    breakdown.credits_per_transaction, credit_price
                ),
                "monthly": credits_to_currency(breakdown.monthly_credits, credit_price),
                "annual": credits_to_currency(breakdown.annual_credits, credit_price),
                "setup": credits_to_currency(breakdown.setup_costs, credit_price),
            },
        }


def estimate_for_session(
    session_store: InMemorySessionStore,
    catalog: PricingCatalog,
    session_id: str,
    credit_price: float = DEFAULT_CREDIT_PRICE,
    model: Optional[str] = None,
) -> Dict[str, Any]:
    """Estimate the workload discovered (or replayed) in a session.

    Raises:
        SessionError: If the session is unknown or discovery is unfinished.
    """
    session_data = session_store.get(session_id)
    if session_data is None:
        raise SessionError(f"No active session '{session_id}'")
    if not is_complete(session_data.state):
        raise SessionError(
            f"Discovery for session '{session_id}' is not finished "
            f"(step {session_data.state.current_step})"
        )

    data = session_data.state.extracted_data
    workload = to_workload(data, model or session_data.model)
    source = "scenario" if session_data.scenario_id else "discovery"
    try:
        result = estimate_workload(workload, catalog, credit_price)
    except PreconditionViolation:
        increment_errors("precondition_violation", session_id=session_id)
        increment_estimates_generated(source, success=False)
        raise

    increment_estimates_generated(source)
    record_estimate_credits(source, result["breakdown"]["monthly_credits"])
    logger.info(
        f"Estimate for session {session_id}: "
        f"{result['breakdown']['monthly_credits']:.2f} credits/month"
    )
    result["summary"] = generate_workflow_summary(data)
    result["scenario_id"] = session_data.scenario_id
    return result


async def play_scenario(
    session_store: InMemorySessionStore,
    session_id: str,
    scenario_id: str,
    model: str,
    player: Optional[ScenarioPlayer] = None,
    on_message: Optional[MessageCallback] = None,
) -> Dict[str, Any]:
    """
    Replay a demo scenario into a session, replacing whatever it held.

    Raises:
        SessionError: If the scenario id is unknown.
    """
    scenario = get_scenario_by_id(scenario_id)
    if scenario is None:
        raise SessionError(f"Unknown scenario '{scenario_id}'")

    with _stage_span("Scenario replay", session_id=session_id, scenario_id=scenario_id):
        player = player or ScenarioPlayer(speed=0)
        history: List[Dict[str, str]] = []

        async def _record(message):
            role = "assistant" if message.role == "ai" else "user"
            history.append({"role": role, "content": message.message})
            if on_message is not None:
                result = on_message(message)
                if inspect.isawaitable(result):
                    await result

        state = await player.play(scenario, on_message=_record)
        session_data = SessionData(state=state, history=history, model=model, scenario_id=scenario.id)
        with session_store.lock(session_id):
            session_store.set(session_id, session_data)
        logger.info(f"Scenario {scenario_id} replayed into session {session_id}")
        return _turn_result(session_data)


async def reset_session(session_store: InMemorySessionStore, session_id: str) -> None:
    """Clear a session's stored state."""
    session_store.delete(session_id)
