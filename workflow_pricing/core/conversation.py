"""Conversation engine: guided discovery of a workflow's cost drivers.

A fixed, linear list of questions. Each answer advances the state by exactly
one step and merges the question's extraction into the accumulated
ExtractedWorkflowData. Extraction functions receive the full prior state, so
later questions can build on earlier answers (the monthly volume is split
across the channels picked in the channel question).
"""

import dataclasses
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .models import (
    WORKING_DAYS_PER_MONTH,
    ChannelVolumes,
    ConversationState,
    ExtractedWorkflowData,
    FeatureUsage,
    SetupRequirements,
    TokenUsage,
    WorkloadDescription,
)

Extraction = Dict[str, Any]


class QuestionKind(str, Enum):
    TEXT = "text"
    CHOICE = "choice"
    MULTI_CHOICE = "multiselect"
    NUMBER = "number"


@dataclass(frozen=True)
class Question:
    id: str
    prompt: str
    kind: QuestionKind
    extract: Callable[[Any, ConversationState], Extraction]
    options: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "kind": self.kind.value,
            "options": list(self.options),
        }


DEFAULT_MONTHLY_VOLUME = 5000
EMAIL_SHARE_NUMERATOR, EMAIL_SHARE_DENOMINATOR = 3, 5  # 60% email / 40% chat

CHANNEL_LABELS: Dict[str, str] = {
    "Email": "email",
    "Chat/Messaging": "chat",
    "Voice Calls": "voice",
    "Document Upload": "documents",
}


def _as_count(answer: Any, default: int) -> int:
    """Parse a numeric answer; unparseable input gives the default, negatives clamp to 0."""
    if isinstance(answer, bool):
        return default
    if isinstance(answer, (int, float)):
        return max(int(answer), 0)
    match = re.search(r"-?\d[\d,]*", str(answer or ""))
    if not match:
        return default
    value = int(match.group(0).replace(",", ""))
    return max(value, 0)


def _text(answer: Any) -> str:
    return "" if answer is None else str(answer)


def _extract_business_problem(answer: Any, state: ConversationState) -> Extraction:
    return {"workflow_description": _text(answer).strip()}


def _extract_channels(answer: Any, state: ConversationState) -> Extraction:
    if isinstance(answer, str):
        answer = [answer]
    selected = []
    for label in answer or ():
        channel = CHANNEL_LABELS.get(label)
        if channel and channel not in selected:
            selected.append(channel)
    return {"channels": tuple(selected)}


def split_monthly_volume(total: int, channels: Tuple[str, ...]) -> Extraction:
    """
    Distribute a monthly interaction total across the selected channels.

    Email and chat share 60/40 and always sum to ``total``. A single text
    channel takes everything. With neither, the total is read as workflow
    triggers spread over the working days of a month.
    """
    has_email = "email" in channels
    has_chat = "chat" in channels
    if has_email and has_chat:
        emails = total * EMAIL_SHARE_NUMERATOR // EMAIL_SHARE_DENOMINATOR
        return {
            "emails_per_month": emails,
            "chats_per_month": total - emails,
            "workflow_triggers_per_day": 0,
        }
    if has_email:
        return {"emails_per_month": total, "chats_per_month": 0, "workflow_triggers_per_day": 0}
    if has_chat:
        return {"emails_per_month": 0, "chats_per_month": total, "workflow_triggers_per_day": 0}
    return {
        "emails_per_month": 0,
        "chats_per_month": 0,
        "workflow_triggers_per_day": total // WORKING_DAYS_PER_MONTH,
    }


def _extract_monthly_volume(answer: Any, state: ConversationState) -> Extraction:
    total = _as_count(answer, DEFAULT_MONTHLY_VOLUME)
    return split_monthly_volume(total, state.extracted_data.channels)


def _extract_workflow_steps(answer: Any, state: ConversationState) -> Extraction:
    text = _text(answer)
    if "1-3" in text:
        return {"complexity_tier": "Low"}
    if "4-6" in text:
        return {"complexity_tier": "Medium"}
    return {"complexity_tier": "High"}


def _extract_knowledge_base(answer: Any, state: ConversationState) -> Extraction:
    text = _text(answer)
    if text.startswith("No"):
        return {"requires_knowledge_base": False, "rag_queries": 0}
    if "occasionally" in text:
        return {"requires_knowledge_base": True, "rag_queries": 2}
    return {"requires_knowledge_base": True, "rag_queries": 5}


def _extract_integrations(answer: Any, state: ConversationState) -> Extraction:
    text = _text(answer)
    if text.startswith("No"):
        return {"tool_calls": 0, "db_queries": 0}
    if "1-2" in text:
        return {"tool_calls": 1, "db_queries": 3}
    return {"tool_calls": 3, "db_queries": 5}


def _extract_agent_needs(answer: Any, state: ConversationState) -> Extraction:
    text = _text(answer)
    if "single" in text:
        return {"num_agents": 1, "needs_orchestration": False, "inter_agent_tokens": 0}
    if "small" in text:
        return {"num_agents": 3, "needs_orchestration": True, "inter_agent_tokens": 500}
    return {"num_agents": 6, "needs_orchestration": True, "inter_agent_tokens": 1000}


def _extract_document_processing(answer: Any, state: ConversationState) -> Extraction:
    docs = _as_count(answer, 0)
    return {"docs_per_month": docs, "pages_per_doc": 5 if docs > 0 else 0}


def _extract_safety_requirements(answer: Any, state: ConversationState) -> Extraction:
    text = _text(answer)
    if text.startswith("Low"):
        return {"reflection_runs": 0}
    if text.startswith("Moderate"):
        return {"reflection_runs": 1}
    return {"reflection_runs": 2}


def _extract_response_length(answer: Any, state: ConversationState) -> Extraction:
    text = _text(answer)
    if text.startswith("Short"):
        return {"estimated_input_tokens": 1000, "estimated_output_tokens": 200}
    if text.startswith("Medium"):
        return {"estimated_input_tokens": 2000, "estimated_output_tokens": 800}
    return {"estimated_input_tokens": 4000, "estimated_output_tokens": 1500}


QUESTION_FLOW: Tuple[Question, ...] = (
    Question(
        id="business_problem",
        prompt=(
            "Let's start by understanding what you're building. What business problem "
            "or workflow are you trying to automate with AI?"
        ),
        kind=QuestionKind.TEXT,
        extract=_extract_business_problem,
    ),
    Question(
        id="channels",
        prompt=(
            "How will your customers or employees interact with this AI system? "
            "(Select all that apply)"
        ),
        kind=QuestionKind.MULTI_CHOICE,
        options=("Email", "Chat/Messaging", "Voice Calls", "Document Upload", "API/Integration"),
        extract=_extract_channels,
    ),
    Question(
        id="monthly_volume",
        prompt=(
            "How many interactions do you expect per month? Think about emails, chats, "
            "or requests your system will handle."
        ),
        kind=QuestionKind.NUMBER,
        extract=_extract_monthly_volume,
    ),
    Question(
        id="workflow_steps",
        prompt=(
            "Think about the process end-to-end. Roughly how many steps or decisions "
            "does your AI need to make for each request?"
        ),
        kind=QuestionKind.CHOICE,
        options=(
            "1-3 steps (Simple, straightforward tasks)",
            "4-6 steps (Moderate complexity with some logic)",
            "7+ steps (Complex workflows with multiple decision points)",
        ),
        extract=_extract_workflow_steps,
    ),
    Question(
        id="knowledge_base",
        prompt=(
            "Does your AI need to reference company knowledge, documents, or databases "
            "to answer questions?"
        ),
        kind=QuestionKind.CHOICE,
        options=(
            "No - It can work with just the conversation context",
            "Yes - It needs to look up information occasionally (1-2 lookups per request)",
            "Yes - It needs frequent knowledge lookups (3+ lookups per request)",
        ),
        extract=_extract_knowledge_base,
    ),
    Question(
        id="integrations",
        prompt=(
            "Does your AI need to connect with external tools or systems? "
            "(e.g., CRM, payment systems, databases, APIs)"
        ),
        kind=QuestionKind.CHOICE,
        options=(
            "No external integrations needed",
            "Yes - 1-2 simple integrations (like checking a database)",
            "Yes - Multiple complex integrations (CRM, ERP, payment systems, etc.)",
        ),
        extract=_extract_integrations,
    ),
    Question(
        id="agent_needs",
        prompt="Think about the different skills or roles needed. Do you need:",
        kind=QuestionKind.CHOICE,
        options=(
            "A single AI agent to handle everything",
            "A small team (2-3 specialized agents working together)",
            "A full team (4+ agents, each with specific expertise)",
        ),
        extract=_extract_agent_needs,
    ),
    Question(
        id="document_processing",
        prompt=(
            "Will your AI need to read and process documents? If so, approximately "
            "how many documents per month?"
        ),
        kind=QuestionKind.NUMBER,
        extract=_extract_document_processing,
    ),
    Question(
        id="safety_requirements",
        prompt=(
            "How important is it that responses are checked for safety, accuracy, and "
            "quality before being sent to users?"
        ),
        kind=QuestionKind.CHOICE,
        options=(
            "Low priority - Speed is more important",
            "Moderate - Some quality checks are good",
            "High priority - Every response must be thoroughly validated",
        ),
        extract=_extract_safety_requirements,
    ),
    Question(
        id="response_length",
        prompt="What kind of responses will your AI generate?",
        kind=QuestionKind.CHOICE,
        options=(
            "Short and concise (1-2 sentences, like quick answers or confirmations)",
            "Medium length (a paragraph, like email responses or summaries)",
            "Long and detailed (multiple paragraphs, like reports or comprehensive answers)",
        ),
        extract=_extract_response_length,
    ),
)


def initialize_conversation() -> ConversationState:
    """Return a fresh state at step 0 with fully defaulted extracted data."""
    return ConversationState(current_step=0, responses={}, extracted_data=ExtractedWorkflowData())


def get_next_question(state: ConversationState) -> Optional[Question]:
    """Return the question at the current step, or None once the flow is complete."""
    if state.current_step >= len(QUESTION_FLOW):
        return None
    return QUESTION_FLOW[state.current_step]


def is_complete(state: ConversationState) -> bool:
    return get_next_question(state) is None


def process_response(answer: Any, state: ConversationState) -> ConversationState:
    """
    Apply an answer to the current question and return the next state.

    The input state is never modified. In the terminal state there is no
    question to answer and the same state is returned.
    """
    question = get_next_question(state)
    if question is None:
        return state

    extracted = question.extract(answer, state)
    responses = dict(state.responses)
    responses[question.id] = answer

    return ConversationState(
        current_step=state.current_step + 1,
        responses=responses,
        extracted_data=dataclasses.replace(state.extracted_data, **extracted),
    )


def generate_workflow_summary(data: ExtractedWorkflowData) -> str:
    """One-paragraph, human-readable description of the discovered workflow."""
    interactions = ChannelVolumes(
        emails_per_month=data.emails_per_month,
        chats_per_month=data.chats_per_month,
        voice_calls_per_month=data.voice_calls_per_month,
        workflow_triggers_per_day=data.workflow_triggers_per_day,
    ).transactions_per_month
    via = ", ".join(data.channels) if data.channels else "automated workflow triggers"
    plural = "s" if data.num_agents > 1 else ""

    description = data.workflow_description.strip()
    if description and not description.endswith("."):
        description += "."
    lead = f"{description} " if description else ""

    return (
        f"{lead}This system handles approximately {interactions:,} interactions per month "
        f"via {via}. It uses {data.num_agents} AI agent{plural} with "
        f"{data.complexity_tier.lower()} complexity."
    )


def to_workload(data: ExtractedWorkflowData, model: str) -> WorkloadDescription:
    """Convert discovered data into a WorkloadDescription for the cost engine."""
    return WorkloadDescription(
        model=model,
        tokens=TokenUsage(
            input_tokens=data.estimated_input_tokens,
            output_tokens=data.estimated_output_tokens,
            inter_agent_tokens=data.inter_agent_tokens,
        ),
        features=FeatureUsage(
            rag_queries=data.rag_queries,
            tool_calls=data.tool_calls,
            db_queries=data.db_queries,
            memory_ops=data.memory_ops,
            reflection_runs=data.reflection_runs,
            web_fetches=data.web_fetches,
            deep_crawl_pages=data.deep_crawl_pages,
        ),
        setup=SetupRequirements(
            agents=data.num_agents,
            knowledge_bases=1 if data.requires_knowledge_base else 0,
            tools=data.tool_calls,
            eval_suites=1 if data.reflection_runs > 0 else 0,
        ),
        channels=ChannelVolumes(
            emails_per_month=data.emails_per_month,
            chats_per_month=data.chats_per_month,
            voice_calls_per_month=data.voice_calls_per_month,
            workflow_triggers_per_day=data.workflow_triggers_per_day,
        ),
    )
