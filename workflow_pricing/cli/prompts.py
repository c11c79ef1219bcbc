"""CLI prompts and formatting utilities."""

from typing import Any, Dict, List, Mapping, Sequence

BREAKDOWN_LABELS = (
    ("token_cost", "Token cost"),
    ("token_cost_with_handling_fee", "Token cost + handling fee"),
    ("inter_agent_cost", "Inter-agent cost"),
    ("feature_cost", "Feature cost"),
    ("credits_per_transaction", "Credits per transaction"),
    ("monthly_credits", "Monthly credits"),
    ("annual_credits", "Annual credits"),
    ("setup_costs", "Setup (one-time)"),
    ("total_monthly_with_setup", "First month incl. setup"),
    ("total_annual_with_setup", "First year incl. setup"),
)


def print_header(title: str) -> None:
    """Print a formatted section header."""
    print(f"\n{'=' * 60}")
    print(f"=== {title}")
    print(f"{'=' * 60}\n")


def print_agent_response(response: str) -> None:
    """Print assistant text with formatting."""
    print("Assistant: ", end="", flush=True)
    print(response, flush=True)
    print()


def print_question(question: Mapping[str, Any]) -> None:
    """Print a discovery question with numbered options, if it has any."""
    print_agent_response(question["prompt"])
    options: Sequence[str] = question.get("options") or ()
    for index, option in enumerate(options, start=1):
        print(f"  {index}. {option}")
    if question.get("kind") == "multiselect":
        print("  (pick one or more, separated by commas)")
    if options:
        print()


def print_scripted_message(role: str, message: str) -> None:
    speaker = "Assistant" if role == "ai" else "Customer"
    print(f"{speaker}: {message}\n", flush=True)


def print_scenario_menu(scenarios: List[Dict[str, Any]]) -> None:
    print_header("Demo Scenarios")
    for index, scenario in enumerate(scenarios, start=1):
        print(f"  {index}. {scenario['title']} ({scenario['industry']})")
        print(f"     {scenario['description']}")
    print()


def print_completion_message() -> None:
    """Print discovery completion message."""
    print("✅ Discovery complete!\n")


def print_error(error: str) -> None:
    """Print error message."""
    print(f"❌ Error: {error}\n", flush=True)


def print_workflow_start() -> None:
    """Print workflow start message."""
    print_header("Starting Workflow Discovery")


def print_final_message() -> None:
    """Print final success message."""
    print("=" * 60)
    print("Estimate complete!")
    print("=" * 60)


def print_workflow_summary(summary: str) -> None:
    """Display a friendly summary of the discovered workflow."""
    print("\n" + "=" * 60)
    print("📋 WORKFLOW SUMMARY")
    print("=" * 60)
    print(f"\n{summary}\n")
    print("=" * 60)


def print_estimate(estimate: Mapping[str, Any]) -> None:
    """Print the cost breakdown, volume bands and formatted totals."""
    print_header(f"Cost Estimate ({estimate['model']})")
    print(f"Transactions per month: {estimate['transactions_per_month']:,}\n")

    breakdown = estimate["breakdown"]
    for key, label in BREAKDOWN_LABELS:
        print(f"  {label:<30} {breakdown[key]:>16,.4f}")

    formatted = estimate.get("formatted") or {}
    if formatted:
        print(f"\nIn {formatted['currency']}:")
        print(f"  Per transaction: {formatted['per_transaction']}")
        print(f"  Monthly:         {formatted['monthly']}")
        print(f"  Annual:          {formatted['annual']}")
        print(f"  Setup:           {formatted['setup']}")

    print("\nVolume scenarios (credits):")
    for band in estimate["bands"]:
        print(f"  {band['label']:<26} {band['monthly_credits']:>14,.2f} / month")
    print()
