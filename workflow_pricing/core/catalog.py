"""Pricing catalog: model token rates, feature and setup unit costs, handling fee.

Catalogs are built from row records (the shape a pricing store returns):

    models:       {"model", "input_cost_per_million", "output_cost_per_million", "hosted", "enabled"}
    features:     {"feature_name", "cost_credits", "enabled"}
    setup_items:  {"item_name", "cost_credits", "enabled"}
    handling_fee: {"fee_percentage", "applies_to", "enabled"}

Validation happens once, at load time. A catalog that is missing any feature
or setup rate is rejected outright, so the cost engine never has to guess a
price.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from workflow_pricing.shared.errors import ConfigurationError


class FeatureKind(str, Enum):
    """Per-transaction features; values are the catalog row names."""

    RAG_QUERY = "RAG Query"
    TOOL_CALL = "Tool Call"
    DB_QUERY = "DB Query"
    MEMORY_OP = "Memory Operation"
    REFLECTION_RUN = "Reflection Run"
    WEB_FETCH = "Web Fetch"
    DEEP_CRAWL_PAGE = "Deep Crawl Page"
    INTER_AGENT_TOKEN = "Inter-Agent Token"  # credits per million tokens


# FeatureUsage attribute charged at each feature rate
FEATURE_USAGE_FIELDS: Mapping[FeatureKind, str] = MappingProxyType({
    FeatureKind.RAG_QUERY: "rag_queries",
    FeatureKind.TOOL_CALL: "tool_calls",
    FeatureKind.DB_QUERY: "db_queries",
    FeatureKind.MEMORY_OP: "memory_ops",
    FeatureKind.REFLECTION_RUN: "reflection_runs",
    FeatureKind.WEB_FETCH: "web_fetches",
    FeatureKind.DEEP_CRAWL_PAGE: "deep_crawl_pages",
})


class SetupItem(str, Enum):
    AGENT = "Agent Setup"
    KNOWLEDGE_BASE = "Knowledge Base"
    TOOL = "Tool Integration"
    EVAL_SUITE = "Evaluation Suite"


SETUP_REQUIREMENT_FIELDS: Mapping[SetupItem, str] = MappingProxyType({
    SetupItem.AGENT: "agents",
    SetupItem.KNOWLEDGE_BASE: "knowledge_bases",
    SetupItem.TOOL: "tools",
    SetupItem.EVAL_SUITE: "eval_suites",
})


class FeeScope(str, Enum):
    HOSTED = "hosted"
    ALL = "all"


@dataclass(frozen=True)
class ModelRate:
    """Token rates per million tokens for one model."""

    input_cost_per_million: float
    output_cost_per_million: float
    hosted: bool  # Hosted by the pricing provider; drives handling-fee eligibility


@dataclass(frozen=True)
class HandlingFeePolicy:
    fee_percentage: float
    applies_to: FeeScope = FeeScope.HOSTED

    def applies(self, is_hosted: bool) -> bool:
        return self.applies_to is FeeScope.ALL or (
            self.applies_to is FeeScope.HOSTED and is_hosted
        )


NO_HANDLING_FEE = HandlingFeePolicy(fee_percentage=0.0, applies_to=FeeScope.ALL)


@dataclass(frozen=True)
class PricingCatalog:
    """Immutable rate tables for one pricing context."""

    models: Mapping[str, ModelRate]
    feature_rates: Mapping[FeatureKind, float]
    setup_rates: Mapping[SetupItem, float]
    handling_fee: HandlingFeePolicy
    disabled_models: FrozenSet[str] = field(default_factory=frozenset)

    def knows_model(self, name: str) -> bool:
        """True if the model appears in the catalog at all, enabled or not."""
        return name in self.models or name in self.disabled_models

    def model_names(self) -> List[str]:
        """Enabled model names, sorted for display."""
        return sorted(self.models)

    def model_rate(self, name: str) -> ModelRate:
        """Return the rate row for an enabled model or raise ConfigurationError."""
        rate = self.models.get(name)
        if rate is None:
            if name in self.disabled_models:
                raise ConfigurationError(f"Model '{name}' is disabled in the pricing catalog")
            raise ConfigurationError(f"Model '{name}' is not in the pricing catalog")
        return rate

    def feature_rate(self, kind: FeatureKind) -> float:
        try:
            return self.feature_rates[kind]
        except KeyError:
            raise ConfigurationError(f"No pricing for feature '{kind.value}'") from None


# Bundled defaults, used when no external catalog is configured.
DEFAULT_MODEL_ROWS: List[Dict[str, Any]] = [
    {"model": "Claude 3.5 Sonnet", "input_cost_per_million": 3.0, "output_cost_per_million": 15.0, "hosted": True, "enabled": True},
    {"model": "Claude 3.5 Haiku", "input_cost_per_million": 0.8, "output_cost_per_million": 4.0, "hosted": True, "enabled": True},
    {"model": "GPT-4o", "input_cost_per_million": 2.5, "output_cost_per_million": 10.0, "hosted": True, "enabled": True},
    {"model": "GPT-4o mini", "input_cost_per_million": 0.15, "output_cost_per_million": 0.6, "hosted": True, "enabled": True},
    {"model": "Gemini 1.5 Flash", "input_cost_per_million": 0.075, "output_cost_per_million": 0.3, "hosted": True, "enabled": True},
    {"model": "GPT-4o (own key)", "input_cost_per_million": 2.5, "output_cost_per_million": 10.0, "hosted": False, "enabled": True},
]

DEFAULT_FEATURE_ROWS: List[Dict[str, Any]] = [
    {"feature_name": FeatureKind.RAG_QUERY.value, "cost_credits": 0.05, "enabled": True},
    {"feature_name": FeatureKind.TOOL_CALL.value, "cost_credits": 1.0, "enabled": True},
    {"feature_name": FeatureKind.DB_QUERY.value, "cost_credits": 0.02, "enabled": True},
    {"feature_name": FeatureKind.MEMORY_OP.value, "cost_credits": 0.005, "enabled": True},
    {"feature_name": FeatureKind.REFLECTION_RUN.value, "cost_credits": 0.05, "enabled": True},
    {"feature_name": FeatureKind.WEB_FETCH.value, "cost_credits": 0.1, "enabled": True},
    {"feature_name": FeatureKind.DEEP_CRAWL_PAGE.value, "cost_credits": 0.25, "enabled": True},
    {"feature_name": FeatureKind.INTER_AGENT_TOKEN.value, "cost_credits": 1.0, "enabled": True},
]

DEFAULT_SETUP_ROWS: List[Dict[str, Any]] = [
    {"item_name": SetupItem.AGENT.value, "cost_credits": 0.05, "enabled": True},
    {"item_name": SetupItem.KNOWLEDGE_BASE.value, "cost_credits": 1.0, "enabled": True},
    {"item_name": SetupItem.TOOL.value, "cost_credits": 0.1, "enabled": True},
    {"item_name": SetupItem.EVAL_SUITE.value, "cost_credits": 2.0, "enabled": True},
]

DEFAULT_HANDLING_FEE_ROW: Dict[str, Any] = {"fee_percentage": 25.0, "applies_to": "hosted", "enabled": True}


def _cost(row: Mapping[str, Any], key: str, label: str) -> float:
    value = row.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{label}: '{key}' must be a number, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{label}: '{key}' must not be negative")
    return float(value)


def _enabled(row: Mapping[str, Any]) -> bool:
    return bool(row.get("enabled", True))


def _load_models(rows: Iterable[Mapping[str, Any]]):
    models: Dict[str, ModelRate] = {}
    disabled = set()
    for row in rows:
        name = row.get("model")
        if not name:
            raise ConfigurationError(f"Model row without a name: {dict(row)!r}")
        if name in models or name in disabled:
            raise ConfigurationError(f"Duplicate model row '{name}'")
        if not _enabled(row):
            disabled.add(name)
            continue
        hosted = row.get("hosted")
        if not isinstance(hosted, bool):
            raise ConfigurationError(f"Model '{name}' must declare 'hosted' as true or false")
        models[name] = ModelRate(
            input_cost_per_million=_cost(row, "input_cost_per_million", f"Model '{name}'"),
            output_cost_per_million=_cost(row, "output_cost_per_million", f"Model '{name}'"),
            hosted=hosted,
        )
    if not models:
        raise ConfigurationError("Pricing catalog has no enabled models")
    return models, frozenset(disabled)


def _load_rates(rows, enum_cls, name_key: str, label: str):
    rates = {}
    seen = set()
    for row in rows:
        raw_name = row.get(name_key)
        try:
            kind = enum_cls(raw_name)
        except ValueError:
            raise ConfigurationError(f"Unknown {label} '{raw_name}'") from None
        if kind in seen:
            raise ConfigurationError(f"Duplicate {label} row '{raw_name}'")
        seen.add(kind)
        if _enabled(row):
            rates[kind] = _cost(row, "cost_credits", f"{label.capitalize()} '{raw_name}'")

    missing = [kind.value for kind in enum_cls if kind not in rates]
    if missing:
        raise ConfigurationError(
            f"Pricing catalog is missing enabled {label} rates: {', '.join(missing)}"
        )
    return rates


def _load_handling_fee(row: Optional[Mapping[str, Any]]) -> HandlingFeePolicy:
    if row is None:
        raise ConfigurationError("Pricing catalog has no handling fee policy")
    if not _enabled(row):
        return NO_HANDLING_FEE
    try:
        scope = FeeScope(row.get("applies_to"))
    except ValueError:
        raise ConfigurationError(
            f"Handling fee 'applies_to' must be 'hosted' or 'all', got {row.get('applies_to')!r}"
        ) from None
    return HandlingFeePolicy(
        fee_percentage=_cost(row, "fee_percentage", "Handling fee"),
        applies_to=scope,
    )


def load_catalog(
    models: Iterable[Mapping[str, Any]],
    features: Iterable[Mapping[str, Any]],
    setup_items: Iterable[Mapping[str, Any]],
    handling_fee: Optional[Mapping[str, Any]],
) -> PricingCatalog:
    """
    Validate catalog rows and build an immutable PricingCatalog.

    Disabled feature or setup rows count as missing. A disabled handling fee
    row means no surcharge.

    Raises:
        ConfigurationError: If any rate is missing, duplicated, negative or malformed.
    """
    model_rates, disabled = _load_models(models)
    return PricingCatalog(
        models=MappingProxyType(model_rates),
        feature_rates=MappingProxyType(_load_rates(features, FeatureKind, "feature_name", "feature")),
        setup_rates=MappingProxyType(_load_rates(setup_items, SetupItem, "item_name", "setup item")),
        handling_fee=_load_handling_fee(handling_fee),
        disabled_models=disabled,
    )


def load_catalog_file(path: str) -> PricingCatalog:
    """Load a catalog from a JSON file with models/features/setup_items/handling_fee keys."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as err:
        raise ConfigurationError(f"Cannot read pricing catalog '{path}': {err}") from err

    if not isinstance(data, dict):
        raise ConfigurationError(f"Pricing catalog '{path}' must contain a JSON object")

    return load_catalog(
        data.get("models", []),
        data.get("features", []),
        data.get("setup_items", []),
        data.get("handling_fee"),
    )


def default_catalog() -> PricingCatalog:
    """Build the bundled default catalog."""
    return load_catalog(
        DEFAULT_MODEL_ROWS,
        DEFAULT_FEATURE_ROWS,
        DEFAULT_SETUP_ROWS,
        DEFAULT_HANDLING_FEE_ROW,
    )
