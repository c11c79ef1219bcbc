"""Shared workflow handlers for both CLI and Web interfaces."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from opentelemetry.trace import SpanKind

from workflow_pricing.core.models import workload_from_dict
from workflow_pricing.core.orchestrator import (
    estimate_for_session,
    estimate_workload,
    play_scenario,
    reset_session,
    run_discovery_turn,
    start_discovery,
)
from workflow_pricing.core.scenarios import DEMO_SCENARIOS, MessageCallback, ScenarioPlayer
from workflow_pricing.shared.errors import (
    ConfigurationError,
    PreconditionViolation,
    SessionError,
)
from workflow_pricing.shared.formatting import format_credits, format_currency, get_currency
from workflow_pricing.shared.metrics import (
    increment_errors,
    increment_estimates_generated,
    record_estimate_credits,
)
from workflow_pricing.shared.tracing import get_tracer
from .context import InterfaceContext

# Get logger (setup handled by application entry point)
logger = logging.getLogger(__name__)


def _handler_span(operation: str, *, session_id: Optional[str] = None, **attrs: Any):
    """Create a span for handler operations with session and operation context.

    Args:
        operation: Name of the handler operation (e.g., "chat_turn", "estimate")
        session_id: Optional session identifier for correlation
        **attrs: Additional span attributes

    Returns:
        Context manager for the span
    """
    tracer = get_tracer(instrumenting_module_name="workflow_pricing.handlers")
    attributes: Dict[str, Any] = {
        "handler.operation": operation,
        **attrs,
    }
    if session_id:
        attributes["session.id"] = session_id
    return tracer.start_as_current_span(
        name=f"handler.{operation}",
        kind=SpanKind.INTERNAL,
        attributes=attributes,
    )


def _error_result(error: Exception, **extra: Any) -> Dict[str, Any]:
    return {"error": str(error), "error_type": type(error).__name__, **extra}


def _with_response(result: Dict[str, Any]) -> Dict[str, Any]:
    """Add the text shown to the user: the next prompt, or the summary when done."""
    question = result.get("question")
    result["response"] = question["prompt"] if question else (result.get("summary") or "")
    return result


def _formatted(result: Mapping[str, Any], currency: str) -> Dict[str, str]:
    usd = result["usd"]
    breakdown = result["breakdown"]
    return {
        "currency": currency.upper(),
        "per_transaction": format_currency(usd["credits_per_transaction"], currency, decimals=4),
        "monthly": format_currency(usd["monthly"], currency),
        "annual": format_currency(usd["annual"], currency),
        "setup": format_currency(usd["setup"], currency),
        "credits_per_transaction": format_credits(breakdown["credits_per_transaction"]),
    }


class WorkflowHandler:
    """
    Centralized handler for workflow operations used by all interfaces.

    Converts domain errors into result dictionaries with an 'error' key so
    interfaces can render them without their own exception handling.
    """

    def handle_start(
        self,
        context: InterfaceContext,
        session_id: str,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the session's current question, starting discovery if needed."""
        with _handler_span("start", session_id=session_id):
            result = start_discovery(
                context.session_store, session_id, model or context.default_model
            )
            return _with_response(result)

    async def handle_chat_turn(
        self,
        context: InterfaceContext,
        session_id: str,
        message: Any,
    ) -> Dict[str, Any]:
        """
        Apply one discovery answer.

        A message for a session that does not exist yet answers the first
        question of a newly started session.

        Args:
            context: InterfaceContext with loaded catalog and session store
            session_id: Unique identifier for the discovery session
            message: Answer to the current question

        Returns:
            Dictionary with:
                - 'response': Next prompt or workflow summary
                - 'question': Next question or None
                - 'is_done': Whether discovery is complete
                - 'extracted_data': Facts gathered so far
                - 'history': Full conversation history
        """
        with _handler_span("chat_turn", session_id=session_id):
            if not context.validate():
                logger.error("Context not properly initialized for chat turn")
                return {
                    "error": "Context not properly initialized",
                    "response": "",
                    "is_done": False,
                }

            if context.session_store.get(session_id) is None:
                start_discovery(context.session_store, session_id, context.default_model)

            try:
                result = run_discovery_turn(context.session_store, session_id, message)
            except SessionError as e:
                logger.warning(f"Chat turn rejected for {session_id}: {e}")
                increment_errors("session_error", session_id)
                return _error_result(e, response="", is_done=False)
            except PreconditionViolation as e:
                logger.warning(f"Answer rejected for {session_id}: {e}")
                increment_errors("invalid_answer", session_id)
                return _error_result(e, response="", is_done=False)

            logger.debug(
                f"Chat turn complete for {session_id}: step={result['step']} is_done={result['is_done']}"
            )
            return _with_response(result)

    async def handle_estimate(
        self,
        context: InterfaceContext,
        session_id: str,
        currency: str = "USD",
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Price the workload discovered in a session.

        Returns:
            Estimate dictionary (breakdown, bands, forecast, usd, formatted,
            summary) or a dictionary with an 'error' key
        """
        with _handler_span("estimate", session_id=session_id, currency=currency):
            if not context.validate():
                logger.error("Context not properly initialized for estimate")
                return {"error": "Context not properly initialized"}

            try:
                get_currency(currency)
                result = estimate_for_session(
                    context.session_store,
                    context.catalog,
                    session_id,
                    credit_price=context.credit_price,
                    model=model,
                )
            except SessionError as e:
                logger.warning(f"Estimate unavailable for session {session_id}: {e}")
                increment_errors("session_error", session_id)
                return _error_result(e)
            except PreconditionViolation as e:
                logger.warning(f"Invalid estimate request for session {session_id}: {e}")
                return _error_result(e)
            except ConfigurationError as e:
                logger.error(f"Pricing configuration error for session {session_id}: {e}")
                increment_errors("configuration_error", session_id)
                return _error_result(e)

            result["formatted"] = _formatted(result, currency)
            return result

    def handle_direct_estimate(
        self,
        context: InterfaceContext,
        payload: Mapping[str, Any],
        currency: str = "USD",
    ) -> Dict[str, Any]:
        """
        Price a workload given as flat numeric fields, without a discovery session.

        Missing fields take the slider defaults.
        """
        with _handler_span("direct_estimate", currency=currency):
            try:
                get_currency(currency)
                workload = workload_from_dict(payload, context.default_model)
                result = estimate_workload(workload, context.catalog, context.credit_price)
            except (TypeError, ValueError) as e:
                # PreconditionViolation is a ValueError as well
                logger.warning(f"Rejected direct workload: {e}")
                increment_errors("precondition_violation")
                increment_estimates_generated("direct", success=False)
                return _error_result(e)
            except ConfigurationError as e:
                logger.error(f"Pricing configuration error for direct estimate: {e}")
                increment_errors("configuration_error")
                increment_estimates_generated("direct", success=False)
                return _error_result(e)

            increment_estimates_generated("direct")
            record_estimate_credits("direct", result["breakdown"]["monthly_credits"])
            result["formatted"] = _formatted(result, currency)
            return result

    async def handle_play_scenario(
        self,
        context: InterfaceContext,
        session_id: str,
        scenario_id: str,
        player: Optional[ScenarioPlayer] = None,
        on_message: Optional[MessageCallback] = None,
    ) -> Dict[str, Any]:
        """Replay a demo scenario into the session."""
        with _handler_span("play_scenario", session_id=session_id, scenario_id=scenario_id):
            try:
                result = await play_scenario(
                    context.session_store,
                    session_id,
                    scenario_id,
                    context.default_model,
                    player=player,
                    on_message=on_message,
                )
            except SessionError as e:
                logger.warning(f"Scenario replay failed for {session_id}: {e}")
                increment_errors("unknown_scenario", session_id)
                return _error_result(e)
            result["scenario_id"] = scenario_id
            return _with_response(result)

    def list_scenarios(self) -> List[Dict[str, Any]]:
        return [scenario.summary_dict() for scenario in DEMO_SCENARIOS]

    def list_models(self, context: InterfaceContext) -> List[str]:
        return context.catalog.model_names() if context.catalog else []

    async def handle_reset_session(
        self,
        context: InterfaceContext,
        session_id: str,
    ) -> Dict[str, str]:
        """
        Reset session state.

        Args:
            context: InterfaceContext with session store
            session_id: Unique identifier for the discovery session

        Returns:
            Dictionary with status
        """
        await reset_session(context.session_store, session_id)
        return {"status": "reset"}

    def get_session_history(
        self,
        context: InterfaceContext,
        session_id: str,
    ) -> Dict[str, Any]:
        """
        Get conversation history for a session.

        Returns:
            Dictionary with:
                - 'history': List of messages
                - 'state': {step, responses, extractedData} snapshot
                - 'error': Error message if applicable
        """
        session_data = context.session_store.get(session_id)
        if not session_data:
            return {"error": "Session not found", "history": []}

        return {
            "history": session_data.history,
            "state": context.session_store.snapshot(session_id),
        }
