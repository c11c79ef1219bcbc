"""Workflow Pricing Assistant - CLI entry point."""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from opentelemetry import trace
from opentelemetry.trace import SpanKind

from workflow_pricing.cli.interface import CLIInterface
from workflow_pricing.cli.prompts import (
    print_agent_response,
    print_completion_message,
    print_error,
    print_estimate,
    print_final_message,
    print_header,
    print_question,
    print_scenario_menu,
    print_scripted_message,
    print_workflow_start,
    print_workflow_summary,
)
from workflow_pricing.core.config import load_environment
from workflow_pricing.shared.errors import WorkflowError
from workflow_pricing.shared.logging import resolve_log_level, setup_logging
from workflow_pricing.shared.metrics import configure_metrics
from workflow_pricing.shared.tracing import configure_tracing, get_tracer

logger = logging.getLogger(__name__)

SESSION_ID = "cli-session"
SERVICE_NAME = "workflow-pricing-cli"


def _pick_option(raw: str, options: Sequence[str]) -> str:
    """Accept either an option number or the option text."""
    raw = raw.strip()
    if raw.isdigit() and 1 <= int(raw) <= len(options):
        return options[int(raw) - 1]
    return raw


def parse_cli_answer(raw: str, question: Mapping[str, Any]) -> Any:
    """
    Turn typed input into the answer shape the question expects.

    Choice questions take a number or label; multi-select questions take a
    comma separated list of either. Other answers pass through as text.
    """
    options = question.get("options") or ()
    kind = question.get("kind")
    if kind == "multiselect":
        return [_pick_option(part, options) for part in raw.split(",") if part.strip()]
    if kind == "choice":
        return _pick_option(raw, options)
    return raw.strip()


async def run_discovery(interface: CLIInterface) -> Dict[str, Any]:
    """Ask every discovery question in turn; returns the final turn result."""
    print_workflow_start()

    result = await interface.start(SESSION_ID)
    while not result.get("is_done"):
        question = result["question"]
        print_question(question)

        user_input = input("You: ")
        if not user_input.strip() and question.get("kind") != "text":
            continue

        result = await interface.chat_turn(SESSION_ID, parse_cli_answer(user_input, question))
        if "error" in result:
            raise WorkflowError(result["error"])

    print_completion_message()
    return result


async def run_scenario(interface: CLIInterface, scenario_id: str) -> Dict[str, Any]:
    """Replay a demo scenario at the interface's replay speed."""

    def _show(message) -> None:
        print_scripted_message(message.role, message.message)

    result = await interface.play_scenario(SESSION_ID, scenario_id, on_message=_show)
    if "error" in result:
        raise WorkflowError(result["error"])
    return result


def choose_scenario(scenarios: List[Dict[str, Any]]) -> Optional[str]:
    """Ask for discovery or a demo scenario; None means live discovery."""
    while True:
        choice = input("Start guided discovery (d) or replay a demo scenario (s)? ").strip().lower()
        if choice in ("d", "discovery", ""):
            return None
        if choice in ("s", "scenario"):
            break
        print("Please enter 'd' or 's'.")

    print_scenario_menu(scenarios)
    while True:
        picked = input("Scenario number: ").strip()
        if picked.isdigit() and 1 <= int(picked) <= len(scenarios):
            return scenarios[int(picked) - 1]["id"]
        print(f"Please enter a number between 1 and {len(scenarios)}.")


async def run_cli_workflow(interface: Optional[CLIInterface] = None) -> None:
    """Run the CLI workflow: discovery or replay, then the estimate."""
    interface = interface or CLIInterface()

    scenario_id = choose_scenario(interface.list_scenarios())
    if scenario_id:
        print_header("Scenario Replay")
        result = await run_scenario(interface, scenario_id)
    else:
        result = await run_discovery(interface)

    print_workflow_summary(result.get("summary") or "")

    currency = input("Currency for the estimate (USD/CAD/EUR/INR) [USD]: ").strip().upper() or "USD"
    estimate = await interface.estimate(SESSION_ID, currency=currency)
    if "error" in estimate:
        print_error(estimate["error"])
        return

    print_estimate(estimate)
    print_agent_response(estimate["summary"])
    print_final_message()


async def main() -> None:
    """Main entry point for CLI."""
    load_environment()

    setup_logging(
        name="workflow_pricing_cli",
        level=resolve_log_level(),
        service_name=SERVICE_NAME,
    )
    configure_tracing(service_name=SERVICE_NAME)
    configure_metrics()

    print("Workflow Pricing Assistant")
    print("=" * 60)

    tracer = get_tracer(instrumenting_module_name="workflow_pricing.session")

    # Single long-lived span so all CLI logs correlate.
    session_span = tracer.start_span(
        name="session.cli",
        kind=SpanKind.CLIENT,
        attributes={"session.id": SESSION_ID, "session.type": "cli"},
    )
    try:
        with trace.use_span(session_span, end_on_exit=False):
            await run_cli_workflow()
    except (WorkflowError, EOFError, KeyboardInterrupt) as e:
        print_error(str(e) or type(e).__name__)
    finally:
        session_span.end()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
