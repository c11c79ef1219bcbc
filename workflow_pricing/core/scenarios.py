"""Scripted demo scenarios and the player that replays them.

A scenario is a canned discovery conversation plus the workload facts it
establishes. Replaying one emits the transcript (optionally paced by each
message's delay) and yields a completed ConversationState, so downstream
pricing treats it exactly like a live discovery session.
"""

import asyncio
import dataclasses
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .conversation import QUESTION_FLOW
from .models import ConversationState, ExtractedWorkflowData

logger = logging.getLogger(__name__)

OPENING_PROMPT = (
    "Hello! I'm here to help you estimate the cost of your AI workflow. Let's start by "
    "understanding what you're building. What business problem or workflow are you "
    "trying to automate with AI?"
)


@dataclass(frozen=True)
class ScriptedMessage:
    role: str  # "ai" or "user"
    message: str
    delay_ms: int = 0


@dataclass(frozen=True)
class DemoScenario:
    id: str
    title: str
    description: str
    industry: str
    conversation: Tuple[ScriptedMessage, ...]
    extracted_data: Mapping[str, Any]

    def summary_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "industry": self.industry,
            "messages": len(self.conversation),
        }


def _ai(message: str, delay_ms: int = 1200) -> ScriptedMessage:
    return ScriptedMessage(role="ai", message=message, delay_ms=delay_ms)


def _user(message: str, delay_ms: int = 1300) -> ScriptedMessage:
    return ScriptedMessage(role="user", message=message, delay_ms=delay_ms)


DEMO_SCENARIOS: Tuple[DemoScenario, ...] = (
    DemoScenario(
        id="ecommerce-support",
        title="E-Commerce Customer Support",
        description="Automated support for online retail",
        industry="E-Commerce",
        conversation=(
            _ai(OPENING_PROMPT, 800),
            _user(
                "I run an e-commerce store and want to automate customer support with AI agents "
                "that can handle order inquiries, returns, and product questions.",
                1500,
            ),
            _ai("How many customer inquiries do you handle per month across all channels?"),
            _user("We get about 5,000 emails per month and 3,000 live chat conversations."),
            _ai("Does the AI need to look up information from your database or policies?"),
            _user(
                "Yes, it needs to check order status, look up product details from our catalog, "
                "and reference our return policy. Usually 2-3 lookups per conversation."
            ),
            _ai("Will the AI need to use external tools, for example to update orders or trigger refunds?"),
            _user("Yes, it needs to integrate with Shopify for order updates, Stripe for refunds, and our CRM."),
            _ai("How important is it to validate responses before sending them to customers?"),
            _user("Moderately important. Some basic validation, but speed is also a priority."),
            _ai(
                "I've gathered all the key information: 8,000 monthly interactions (5K email, "
                "3K chat), 2-3 lookups per interaction, Shopify, Stripe and CRM integrations, "
                "and basic response validation.",
                1800,
            ),
        ),
        extracted_data={
            "workflow_description": (
                "E-commerce customer support automation with order tracking, product inquiries, "
                "and return processing"
            ),
            "channels": ("email", "chat"),
            "complexity_tier": "Medium",
            "emails_per_month": 5000,
            "chats_per_month": 3000,
            "voice_calls_per_month": 0,
            "docs_per_month": 0,
            "workflow_triggers_per_day": 0,  # not 267: email and chat volumes already count these runs
            "rag_queries": 2,
            "tool_calls": 3,
            "db_queries": 4,
            "memory_ops": 1,
            "reflection_runs": 0,
            "web_fetches": 0,
            "deep_crawl_pages": 0,
            "estimated_input_tokens": 800,
            "estimated_output_tokens": 400,
            "inter_agent_tokens": 200,
            "num_agents": 2,
            "needs_orchestration": True,
            "requires_knowledge_base": True,
        },
    ),
    DemoScenario(
        id="healthcare-triage",
        title="Healthcare Patient Triage",
        description="AI-powered patient intake & triage",
        industry="Healthcare",
        conversation=(
            _ai(OPENING_PROMPT, 800),
            _user(
                "We need an AI system to help triage patients, collect initial symptoms, and route "
                "them to the appropriate healthcare provider.",
                1400,
            ),
            _ai("How many patient interactions would this system handle per month?"),
            _user("About 2,000 voice calls per month and 1,500 chat conversations on our patient portal."),
            _ai("Does the AI need to access medical protocols, patient history, or clinical guidelines?"),
            _user(
                "Yes: symptom protocols, patient history, provider availability and insurance "
                "eligibility. Probably 4-6 queries per triage."
            ),
            _ai("How important is quality assurance for these recommendations?"),
            _user("Critical. The AI must validate its reasoning and flag low-confidence cases for human review."),
            _ai("Will you need multiple specialized agents?"),
            _user("Yes, 3 agents: a Triage Specialist, a Provider Matcher, and a Scheduling Coordinator."),
            _ai(
                "I have everything I need: 3,500 monthly interactions (2K voice, 1.5K chat), "
                "4-6 lookups per interaction, complex clinical decisions, 3 coordinated agents "
                "and high safety requirements.",
                1800,
            ),
        ),
        extracted_data={
            "workflow_description": (
                "Healthcare patient triage with symptom assessment, urgency evaluation, and "
                "intelligent provider routing"
            ),
            "channels": ("chat", "voice"),
            "complexity_tier": "High",
            "emails_per_month": 0,
            "chats_per_month": 1500,
            "voice_calls_per_month": 2000,
            "docs_per_month": 0,
            "workflow_triggers_per_day": 0,
            "rag_queries": 4,
            "tool_calls": 5,
            "db_queries": 6,
            "memory_ops": 3,
            "reflection_runs": 2,
            "web_fetches": 0,
            "deep_crawl_pages": 0,
            "estimated_input_tokens": 1200,
            "estimated_output_tokens": 600,
            "inter_agent_tokens": 400,
            "num_agents": 3,
            "needs_orchestration": True,
            "requires_knowledge_base": True,
        },
    ),
    DemoScenario(
        id="financial-advisor",
        title="Financial Advisory Assistant",
        description="AI financial planning & investment advice",
        industry="Financial Services",
        conversation=(
            _ai(OPENING_PROMPT, 800),
            _user(
                "We want to build an AI financial advisor that helps clients with investment "
                "planning, portfolio analysis, and financial goal setting.",
                1400,
            ),
            _ai("How many client interactions do you expect per month?"),
            _user("Around 1,000 email consultations and 800 live chat sessions monthly."),
            _ai("Will clients upload documents like tax returns or brokerage statements?"),
            _user("Yes, about 500 documents per month, averaging around 12 pages each."),
            _ai("Will the AI need real-time market data or economic indicators?"),
            _user("Yes, probably 6-8 lookups per interaction for prices, trends and benchmarks."),
            _ai("Would you benefit from multiple specialized agents?"),
            _user("Yes, 4 agents: Portfolio Analyst, Tax Strategist, Risk Assessor, and Compliance Checker."),
            _ai(
                "I've gathered comprehensive details: 1,800 monthly interactions, 500 documents "
                "a month, real-time market lookups, 4 orchestrated agents and strict validation.",
                1800,
            ),
        ),
        extracted_data={
            "workflow_description": (
                "Financial advisory AI with portfolio optimization, tax planning, and personalized "
                "investment strategies"
            ),
            "channels": ("email", "chat", "documents"),
            "complexity_tier": "High",
            "emails_per_month": 1000,
            "chats_per_month": 800,
            "voice_calls_per_month": 0,
            "docs_per_month": 500,
            "pages_per_doc": 12,
            "workflow_triggers_per_day": 0,
            "rag_queries": 5,
            "tool_calls": 6,
            "db_queries": 5,
            "memory_ops": 4,
            "reflection_runs": 3,
            "web_fetches": 7,
            "deep_crawl_pages": 0,
            "estimated_input_tokens": 2000,
            "estimated_output_tokens": 1000,
            "inter_agent_tokens": 600,
            "num_agents": 4,
            "needs_orchestration": True,
            "requires_knowledge_base": True,
        },
    ),
    DemoScenario(
        id="hr-recruitment",
        title="HR Recruitment Assistant",
        description="Automated candidate screening & scheduling",
        industry="Human Resources",
        conversation=(
            _ai(OPENING_PROMPT, 800),
            _user(
                "We need an AI recruitment assistant to screen resumes, schedule interviews, and "
                "answer candidate questions.",
                1400,
            ),
            _ai("How many candidates do you process monthly?"),
            _user("About 500 resumes per month, 1,000 email exchanges and 600 chat conversations."),
            _ai("Does the AI need to match skills against job descriptions and book interviews?"),
            _user("Yes, and it should integrate with our calendar for scheduling."),
            _ai("I've captured everything for your HR recruitment system.", 1500),
        ),
        extracted_data={
            "workflow_description": (
                "HR recruitment automation with resume screening, candidate matching, and "
                "interview scheduling"
            ),
            "channels": ("email", "chat", "documents"),
            "complexity_tier": "Medium",
            "emails_per_month": 1000,
            "chats_per_month": 600,
            "voice_calls_per_month": 0,
            "docs_per_month": 500,
            "pages_per_doc": 2,
            "workflow_triggers_per_day": 0,
            "rag_queries": 3,
            "tool_calls": 4,
            "db_queries": 5,
            "memory_ops": 2,
            "reflection_runs": 1,
            "web_fetches": 2,
            "deep_crawl_pages": 0,
            "estimated_input_tokens": 1000,
            "estimated_output_tokens": 500,
            "inter_agent_tokens": 300,
            "num_agents": 2,
            "needs_orchestration": True,
            "requires_knowledge_base": True,
        },
    ),
    DemoScenario(
        id="legal-contract",
        title="Legal Contract Analysis",
        description="AI-powered contract review & insights",
        industry="Legal",
        conversation=(
            _ai(OPENING_PROMPT, 800),
            _user(
                "We want AI to review legal contracts, identify potential risks, and extract key "
                "terms for our law firm.",
                1400,
            ),
            _ai("How many contracts do you need to review per month?"),
            _user("About 200 contracts monthly, from simple NDAs to complex commercial agreements."),
            _ai("How deep should the analysis go?"),
            _user("Very deep: risk assessment, clause library comparison, and detailed recommendations."),
            _ai("I've gathered everything for your legal contract analysis system.", 1500),
        ),
        extracted_data={
            "workflow_description": (
                "Legal contract analysis with risk assessment, clause extraction, and compliance "
                "checking"
            ),
            "channels": ("documents",),
            "complexity_tier": "High",
            "emails_per_month": 0,
            "chats_per_month": 0,
            "voice_calls_per_month": 0,
            "docs_per_month": 200,
            "pages_per_doc": 20,
            "workflow_triggers_per_day": 9,  # not 7: 200 documents over 22 working days
            "rag_queries": 8,
            "tool_calls": 4,
            "db_queries": 6,
            "memory_ops": 5,
            "reflection_runs": 4,
            "web_fetches": 3,
            "deep_crawl_pages": 0,
            "estimated_input_tokens": 3000,
            "estimated_output_tokens": 1500,
            "inter_agent_tokens": 800,
            "num_agents": 3,
            "needs_orchestration": True,
            "requires_knowledge_base": True,
        },
    ),
)


def get_scenario_by_id(scenario_id: str) -> Optional[DemoScenario]:
    for scenario in DEMO_SCENARIOS:
        if scenario.id == scenario_id:
            return scenario
    return None


def scenario_state(scenario: DemoScenario) -> ConversationState:
    """Completed discovery state carrying the scenario's workload facts over the defaults."""
    return ConversationState(
        current_step=len(QUESTION_FLOW),
        responses={"scenario_id": scenario.id},
        extracted_data=dataclasses.replace(ExtractedWorkflowData(), **scenario.extracted_data),
    )


MessageCallback = Callable[[ScriptedMessage], Union[None, Awaitable[None]]]


class ScenarioPlayer:
    """
    Replays a demo scenario transcript.

    ``speed`` scales every scripted delay: 1.0 replays at authored pace, 0
    replays instantly.
    """

    def __init__(self, speed: float = 1.0, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        self.speed = max(speed, 0.0)
        self._sleep = sleep

    async def play(
        self,
        scenario: DemoScenario,
        on_message: Optional[MessageCallback] = None,
    ) -> ConversationState:
        """
        Emit each scripted message, then return the completed state.

        Args:
            scenario: Scenario to replay
            on_message: Optional callback (sync or async) receiving each message

        Returns:
            ConversationState in the terminal step
        """
        logger.debug(f"Replaying scenario {scenario.id} ({len(scenario.conversation)} messages)")
        for message in scenario.conversation:
            if self.speed > 0 and message.delay_ms > 0:
                await self._sleep(message.delay_ms / 1000 * self.speed)
            if on_message is not None:
                result = on_message(message)
                if inspect.isawaitable(result):
                    await result
        return scenario_state(scenario)

    async def transcript(self, scenario: DemoScenario) -> List[Dict[str, str]]:
        """Replay and collect the transcript in chat-history form."""
        history: List[Dict[str, str]] = []

        def _collect(message: ScriptedMessage) -> None:
            role = "assistant" if message.role == "ai" else "user"
            history.append({"role": role, "content": message.message})

        await self.play(scenario, on_message=_collect)
        return history
