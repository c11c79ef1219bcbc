"""Flask web application for the Workflow Pricing Assistant."""

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request, session
from opentelemetry import trace

from workflow_pricing.core.config import get_flask_secret, load_environment
from workflow_pricing.core.session import InMemorySessionStore
from workflow_pricing.shared.async_utils import run_coroutine
from workflow_pricing.shared.logging import resolve_log_level, setup_logging
from workflow_pricing.shared.metrics import configure_metrics
from workflow_pricing.shared.tracing import configure_tracing
from workflow_pricing.web.handlers import WebHandlers
from workflow_pricing.web.interface import WebInterface
from workflow_pricing.web.session_tracing import (
    end_session_span,
    get_or_create_session_span,
    record_session_event,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "workflow-pricing-web"

# Status codes for errors reported in handler results
_ERROR_STATUS = {
    "SessionError": 400,
    "PreconditionViolation": 422,
    "ValueError": 422,
    "TypeError": 422,
    "ConfigurationError": 500,
}


def configure_observability() -> None:
    """Configure logging, traces and metrics for the web process."""
    setup_logging(
        name="workflow_pricing_web",
        level=resolve_log_level(),
        service_name=SERVICE_NAME,
    )
    configure_tracing(service_name=SERVICE_NAME)
    configure_metrics()


def _status_for(result: Dict[str, Any]) -> int:
    if "error" not in result:
        return 200
    return _ERROR_STATUS.get(result.get("error_type", ""), 400)


def _session_id(create: bool = True) -> Optional[str]:
    session_id = session.get("session_id")
    if session_id is None and create:
        session_id = os.urandom(16).hex()
        session["session_id"] = session_id
    return session_id


def create_app(
    web_interface: Optional[WebInterface] = None,
    secret_key: Optional[str] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        web_interface: Optional WebInterface (defaults to one backed by an in-memory store)
        secret_key: Optional session secret (defaults to FLASK_SECRET_KEY)

    Raises:
        ConfigurationError: If no secret key is given and FLASK_SECRET_KEY is unset.
    """
    app = Flask(__name__)
    app.secret_key = secret_key or get_flask_secret()

    interface = web_interface or WebInterface(InMemorySessionStore())
    handlers = WebHandlers(interface)
    app.config["WEB_HANDLERS"] = handlers

    @app.route("/")
    def index():
        """Describe the API."""
        return jsonify(
            {
                "service": "workflow-pricing-assistant",
                "endpoints": [
                    "/api/question",
                    "/api/chat",
                    "/api/estimate",
                    "/api/scenarios",
                    "/api/models",
                    "/api/history",
                    "/api/reset",
                    "/health",
                ],
            }
        )

    @app.route("/api/question", methods=["GET"])
    def question():
        """Return the current discovery question, starting a session if needed."""
        session_id = _session_id()
        session_span = get_or_create_session_span(session_id)
        with trace.use_span(session_span, end_on_exit=False):
            try:
                return jsonify(run_coroutine(handlers.handle_question(session_id)))
            except Exception as e:
                logger.error(f"Error starting discovery: {e}")
                return jsonify({"error": str(e)}), 500

    @app.route("/api/chat", methods=["POST"])
    def chat():
        """Handle a discovery answer."""
        data = request.get_json(silent=True) or {}
        session_id = _session_id()

        session_span = get_or_create_session_span(session_id)
        with trace.use_span(session_span, end_on_exit=False):
            try:
                result = run_coroutine(handlers.handle_chat(session_id, data))
                record_session_event(
                    session_id,
                    "discovery.turn",
                    is_done=result.get("is_done"),
                    error=result.get("error"),
                )
                return jsonify(result), _status_for(result)
            except Exception as e:
                return jsonify({"error": str(e)}), 500

    @app.route("/api/estimate", methods=["POST"])
    def estimate():
        """Estimate the session's workload, or an explicit 'workload' object."""
        data = request.get_json(silent=True) or {}
        session_id = _session_id(create="workload" in data)

        if session_id is None:
            return jsonify({"error": "No active session"}), 400

        session_span = get_or_create_session_span(session_id)
        with trace.use_span(session_span, end_on_exit=False):
            try:
                result = run_coroutine(handlers.handle_estimate(session_id, data))
                record_session_event(
                    session_id,
                    "estimate",
                    direct="workload" in data,
                    error=result.get("error_type"),
                )
                return jsonify(result), _status_for(result)
            except Exception as e:
                return jsonify({"error": str(e)}), 500

    @app.route("/api/scenarios", methods=["GET"])
    def scenarios():
        """List demo scenarios."""
        return jsonify(handlers.handle_scenarios())

    @app.route("/api/scenarios/<scenario_id>", methods=["POST"])
    def play(scenario_id: str):
        """Replay a demo scenario into the current session."""
        session_id = _session_id()
        session_span = get_or_create_session_span(session_id)
        with trace.use_span(session_span, end_on_exit=False):
            try:
                result = run_coroutine(handlers.handle_play_scenario(session_id, scenario_id))
                record_session_event(session_id, "scenario.replay", scenario_id=scenario_id)
            except Exception as e:
                return jsonify({"error": str(e)}), 500
        if "error" in result:
            return jsonify(result), 404
        return jsonify(result)

    @app.route("/api/models", methods=["GET"])
    def models():
        """List enabled models from the pricing catalog."""
        try:
            return jsonify(run_coroutine(handlers.handle_models()))
        except Exception as e:
            return jsonify({"error": str(e), "models": []}), 500

    @app.route("/api/reset", methods=["POST"])
    def reset():
        """Reset discovery session."""
        session_id = session.get("session_id")
        try:
            if session_id:
                session_span = get_or_create_session_span(session_id)
                with trace.use_span(session_span, end_on_exit=False):
                    run_coroutine(handlers.handle_reset(session_id))
                end_session_span(session_id)
            session.clear()
            return jsonify({"status": "reset"})
        except Exception as e:
            return jsonify({"error": str(e)}), 500

    @app.route("/api/history", methods=["GET"])
    def history():
        """Get conversation history for current session."""
        session_id = session.get("session_id")

        if not session_id:
            return jsonify({"error": "No active session", "history": []}), 400

        session_span = get_or_create_session_span(session_id)
        with trace.use_span(session_span, end_on_exit=False):
            try:
                result = run_coroutine(handlers.handle_history(session_id))
                return jsonify(result), (404 if "error" in result else 200)
            except Exception as e:
                return jsonify({"error": str(e), "history": []}), 500

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "healthy"})

    return app


def main() -> None:
    from workflow_pricing.core.config import get_port

    load_environment()
    configure_observability()
    app = create_app()
    app.run(host="0.0.0.0", port=get_port(), debug=False)


if __name__ == "__main__":
    main()
