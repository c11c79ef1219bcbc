"""Cost engine: turns a workload and a pricing catalog into a CostBreakdown.

Every cost category is linear and independently additive:

    credits_per_transaction = token_cost_with_handling_fee + inter_agent_cost + feature_cost
    monthly_credits         = credits_per_transaction * transactions_per_month
    annual_credits          = monthly_credits * 12
    setup_costs             = one-time, independent of volume

The handling fee is a surcharge on model compute only; it is never applied to
feature or inter-agent cost. All values are credits and are never rounded here.
"""

from typing import Mapping

from workflow_pricing.shared.errors import ConfigurationError, PreconditionViolation
from .catalog import (
    FEATURE_USAGE_FIELDS,
    SETUP_REQUIREMENT_FIELDS,
    FeatureKind,
    HandlingFeePolicy,
    ModelRate,
    PricingCatalog,
    SetupItem,
)
from .models import (
    CostBreakdown,
    FeatureUsage,
    SetupRequirements,
    TokenUsage,
    WorkloadDescription,
)

TOKENS_PER_MILLION = 1_000_000
MONTHS_PER_YEAR = 12


def token_cost(tokens: TokenUsage, model_rate: ModelRate) -> float:
    """Input plus output token cost for one transaction."""
    input_cost = tokens.input_tokens * model_rate.input_cost_per_million / TOKENS_PER_MILLION
    output_cost = tokens.output_tokens * model_rate.output_cost_per_million / TOKENS_PER_MILLION
    return input_cost + output_cost


def apply_handling_fee(base_cost: float, is_hosted: bool, fee_policy: HandlingFeePolicy) -> float:
    """Add the handling fee percentage when the policy covers this model."""
    if fee_policy.applies(is_hosted):
        return base_cost * (1 + fee_policy.fee_percentage / 100)
    return base_cost


def inter_agent_cost(inter_agent_tokens: int, per_million_rate: float) -> float:
    return inter_agent_tokens * per_million_rate / TOKENS_PER_MILLION


def _require_rates(rates: Mapping, expected, label: str) -> None:
    missing = [kind.value for kind in expected if kind not in rates]
    if missing:
        raise ConfigurationError(f"No pricing for {label}: {', '.join(missing)}")


def feature_cost(features: FeatureUsage, feature_rates: Mapping[FeatureKind, float]) -> float:
    """Weighted sum of feature invocations; each rate is independent."""
    _require_rates(feature_rates, FEATURE_USAGE_FIELDS, "feature")
    return sum(
        getattr(features, attr) * feature_rates[kind]
        for kind, attr in FEATURE_USAGE_FIELDS.items()
    )


def setup_cost(setup: SetupRequirements, setup_rates: Mapping[SetupItem, float]) -> float:
    """One-time setup cost. Never scaled by transaction volume."""
    _require_rates(setup_rates, SETUP_REQUIREMENT_FIELDS, "setup item")
    return sum(
        getattr(setup, attr) * setup_rates[item]
        for item, attr in SETUP_REQUIREMENT_FIELDS.items()
    )


def credits_per_transaction(
    token_cost_with_fee: float, inter_agent: float, features: float
) -> float:
    return token_cost_with_fee + inter_agent + features


def monthly_total(per_transaction: float, transactions_per_month: int) -> float:
    return per_transaction * transactions_per_month


def annual_total(monthly: float) -> float:
    return monthly * MONTHS_PER_YEAR


def validate_workload(workload: WorkloadDescription, catalog: PricingCatalog) -> None:
    """
    Reject a workload before any arithmetic.

    Raises:
        PreconditionViolation: If a count is negative or the model is unknown to the catalog.
    """
    negative = sorted(name for name, value in workload.counts().items() if value < 0)
    if negative:
        raise PreconditionViolation(
            f"Workload counts must be non-negative: {', '.join(negative)}"
        )
    if not catalog.knows_model(workload.model):
        raise PreconditionViolation(f"Unrecognized model '{workload.model}'")


def complete_breakdown(workload: WorkloadDescription, catalog: PricingCatalog) -> CostBreakdown:
    """
    Compute the full cost breakdown for a workload.

    This is the entry point for callers; the functions above exist for reuse
    and for showing individual cost components.

    Raises:
        PreconditionViolation: If the workload fails validation.
        ConfigurationError: If the model is disabled or a rate is missing.
    """
    validate_workload(workload, catalog)
    model_rate = catalog.model_rate(workload.model)

    base_token_cost = token_cost(workload.tokens, model_rate)
    token_cost_with_fee = apply_handling_fee(base_token_cost, model_rate.hosted, catalog.handling_fee)
    coordination_cost = inter_agent_cost(
        workload.tokens.inter_agent_tokens,
        catalog.feature_rate(FeatureKind.INTER_AGENT_TOKEN),
    )
    features = feature_cost(workload.features, catalog.feature_rates)
    per_transaction = credits_per_transaction(token_cost_with_fee, coordination_cost, features)

    monthly = monthly_total(per_transaction, workload.transactions_per_month)
    annual = annual_total(monthly)
    setup = setup_cost(workload.setup, catalog.setup_rates)

    return CostBreakdown(
        token_cost=base_token_cost,
        token_cost_with_handling_fee=token_cost_with_fee,
        inter_agent_cost=coordination_cost,
        feature_cost=features,
        credits_per_transaction=per_transaction,
        monthly_credits=monthly,
        annual_credits=annual,
        setup_costs=setup,
        total_monthly_with_setup=monthly + setup,
        total_annual_with_setup=annual + setup,
    )
