"""Shared data models for workload pricing and discovery flows."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Workflow triggers are counted per working day.
WORKING_DAYS_PER_MONTH = 22


@dataclass(frozen=True)
class TokenUsage:
    """Average tokens per transaction."""

    input_tokens: int = 0
    output_tokens: int = 0
    inter_agent_tokens: int = 0


@dataclass(frozen=True)
class FeatureUsage:
    """Feature invocations per transaction."""

    rag_queries: int = 0
    tool_calls: int = 0
    db_queries: int = 0
    memory_ops: int = 0
    reflection_runs: int = 0
    web_fetches: int = 0
    deep_crawl_pages: int = 0


@dataclass(frozen=True)
class SetupRequirements:
    """One-time setup items, charged once regardless of volume."""

    agents: int = 0
    knowledge_bases: int = 0
    tools: int = 0
    eval_suites: int = 0


@dataclass(frozen=True)
class ChannelVolumes:
    emails_per_month: int = 0
    chats_per_month: int = 0
    voice_calls_per_month: int = 0
    workflow_triggers_per_day: int = 0

    @property
    def transactions_per_month(self) -> int:
        return (
            self.emails_per_month
            + self.chats_per_month
            + self.voice_calls_per_month
            + self.workflow_triggers_per_day * WORKING_DAYS_PER_MONTH
        )


@dataclass(frozen=True)
class WorkloadDescription:
    """Complete usage profile of a workflow, as consumed by the cost engine."""

    model: str
    tokens: TokenUsage = field(default_factory=TokenUsage)
    features: FeatureUsage = field(default_factory=FeatureUsage)
    setup: SetupRequirements = field(default_factory=SetupRequirements)
    channels: ChannelVolumes = field(default_factory=ChannelVolumes)

    @property
    def transactions_per_month(self) -> int:
        """Derived from channel volumes; never set directly."""
        return self.channels.transactions_per_month

    def counts(self) -> Dict[str, int]:
        """Flatten every count field, keyed by its field name."""
        flat: Dict[str, int] = {}
        for part in (self.tokens, self.features, self.setup, self.channels):
            flat.update(asdict(part))
        return flat


# Slider defaults used when a caller supplies only some workload fields.
DEFAULT_SLIDER_WORKLOAD: Dict[str, int] = {
    "emails_per_month": 5000,
    "chats_per_month": 3000,
    "voice_calls_per_month": 0,
    "workflow_triggers_per_day": 100,
    "rag_queries": 2,
    "tool_calls": 1,
    "db_queries": 3,
    "memory_ops": 4,
    "reflection_runs": 1,
    "web_fetches": 0,
    "deep_crawl_pages": 0,
    "input_tokens": 2000,
    "output_tokens": 800,
    "inter_agent_tokens": 500,
    "agents": 3,
    "knowledge_bases": 1,
    "tools": 2,
    "eval_suites": 1,
}


def workload_from_dict(data: Mapping[str, Any], default_model: str) -> WorkloadDescription:
    """
    Build a WorkloadDescription from flat numeric fields (direct slider input).

    Missing fields fall back to DEFAULT_SLIDER_WORKLOAD. Values are coerced with
    int(); range checks are left to the cost engine's validation.

    Args:
        data: Flat mapping such as a JSON request body
        default_model: Model used when ``data`` has no "model" key

    Returns:
        WorkloadDescription
    """
    values = {key: int(data.get(key, default)) for key, default in DEFAULT_SLIDER_WORKLOAD.items()}

    def _pick(cls):
        return cls(**{f.name: values[f.name] for f in fields(cls)})

    return WorkloadDescription(
        model=str(data.get("model") or default_model),
        tokens=_pick(TokenUsage),
        features=_pick(FeatureUsage),
        setup=_pick(SetupRequirements),
        channels=_pick(ChannelVolumes),
    )


@dataclass(frozen=True)
class CostBreakdown:
    """Itemized cost result, in credits."""

    # Per transaction
    token_cost: float
    token_cost_with_handling_fee: float
    inter_agent_cost: float
    feature_cost: float
    credits_per_transaction: float

    # Recurring
    monthly_credits: float
    annual_credits: float

    # One-time
    setup_costs: float

    # Combined
    total_monthly_with_setup: float
    total_annual_with_setup: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for JSON response."""
        return asdict(self)


@dataclass(frozen=True)
class ExtractedWorkflowData:
    """Workload facts accumulated during discovery. Every field has a usable default."""

    # Business workflow
    workflow_description: str = ""
    trigger_events: Tuple[str, ...] = ()
    user_personas: Tuple[str, ...] = ()
    success_criteria: Tuple[str, ...] = ()

    channels: Tuple[str, ...] = ()
    workflow_type: str = ""
    cognitive_requirements: Tuple[str, ...] = ()

    # Knowledge
    requires_knowledge_base: bool = False
    rag_retrieval_volume: int = 0

    external_integrations: Tuple[str, ...] = ()

    # Agents
    num_agents: int = 1
    needs_orchestration: bool = False

    # Tokens
    estimated_input_tokens: int = 2000
    estimated_output_tokens: int = 800
    inter_agent_tokens: int = 0

    # Feature usage
    rag_queries: int = 0
    db_queries: int = 0
    tool_calls: int = 0
    memory_ops: int = 3
    reflection_runs: int = 1
    web_fetches: int = 0
    deep_crawl_pages: int = 0

    # Documents and voice
    docs_per_month: int = 0
    pages_per_doc: int = 0
    voice_calls_per_month: int = 0

    # Classification
    needs_intent_detection: bool = True
    needs_entity_extraction: bool = True

    complexity_tier: str = "Medium"  # "Low", "Medium", "High"

    # Volume
    emails_per_month: int = 5000
    chats_per_month: int = 3000
    workflow_triggers_per_day: int = 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary (tuples become lists)."""
        return {
            key: list(value) if isinstance(value, tuple) else value
            for key, value in asdict(self).items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtractedWorkflowData":
        """Rebuild from a snapshot, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {
            key: tuple(value) if isinstance(value, list) else value
            for key, value in data.items()
            if key in known
        }
        return cls(**values)


@dataclass(frozen=True)
class ConversationState:
    """
    Immutable discovery snapshot.

    Each accepted answer produces a new ConversationState; callers replace
    the reference they hold instead of mutating it.
    """

    current_step: int = 0
    responses: Mapping[str, Any] = field(default_factory=dict)
    extracted_data: ExtractedWorkflowData = field(default_factory=ExtractedWorkflowData)

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot in the {step, responses, extractedData} persistence shape."""
        return {
            "step": self.current_step,
            "responses": dict(self.responses),
            "extractedData": self.extracted_data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConversationState":
        return cls(
            current_step=int(data.get("step", 0)),
            responses=dict(data.get("responses") or {}),
            extracted_data=ExtractedWorkflowData.from_dict(data.get("extractedData") or {}),
        )


@dataclass
class SessionData:
    state: ConversationState
    history: List[dict]
    model: str
    scenario_id: Optional[str] = None  # Set when the session was filled by a demo replay
