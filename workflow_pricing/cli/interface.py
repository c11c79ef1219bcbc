"""CLI interface implementation for the Workflow Pricing Assistant."""

import logging
from typing import Any, Dict, List, Optional

from workflow_pricing.core.scenarios import MessageCallback, ScenarioPlayer
from workflow_pricing.interfaces.base import PricingInterface
from workflow_pricing.interfaces.context import InterfaceContext
from workflow_pricing.interfaces.handlers import WorkflowHandler

# Get logger (setup handled by application entry point)
logger = logging.getLogger(__name__)


class CLIInterface(PricingInterface):
    """Command-line interface implementation."""

    def __init__(self, session_store=None, catalog=None, replay_speed: float = 0.5):
        """
        Initialize CLI interface.

        Args:
            session_store: Optional custom session store (defaults to InMemorySessionStore)
            catalog: Optional preloaded PricingCatalog (defaults to the configured one)
            replay_speed: Delay multiplier for scenario replay (0 replays instantly)
        """
        self.context = InterfaceContext(session_store, catalog=catalog)
        self.handler = WorkflowHandler()
        self.replay_speed = replay_speed

    async def start(self, session_id: str) -> Dict[str, Any]:
        async with self.context as ctx:
            return self.handler.handle_start(ctx, session_id)

    async def chat_turn(self, session_id: str, message: Any) -> Dict[str, Any]:
        """
        Process a single discovery answer.

        Returns:
            Dictionary with response, question, is_done and history
        """
        async with self.context as ctx:
            return await self.handler.handle_chat_turn(ctx, session_id, message)

    async def estimate(
        self,
        session_id: str,
        currency: str = "USD",
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self.context as ctx:
            return await self.handler.handle_estimate(ctx, session_id, currency, model)

    async def play_scenario(
        self,
        session_id: str,
        scenario_id: str,
        on_message: Optional[MessageCallback] = None,
    ) -> Dict[str, Any]:
        """
        Replay a demo scenario, streaming each scripted message to ``on_message``.
        """
        async with self.context as ctx:
            return await self.handler.handle_play_scenario(
                ctx,
                session_id,
                scenario_id,
                player=ScenarioPlayer(speed=self.replay_speed),
                on_message=on_message,
            )

    def list_scenarios(self) -> List[Dict[str, Any]]:
        return self.handler.list_scenarios()

    async def reset_session(self, session_id: str) -> None:
        """
        Reset session state.

        Args:
            session_id: Unique identifier for the discovery session
        """
        await self.handler.handle_reset_session(self.context, session_id)

    async def get_session_history(self, session_id: str) -> list:
        """
        Get conversation history for a session.

        Returns:
            List of messages
        """
        history_dict = self.handler.get_session_history(self.context, session_id)
        return history_dict.get("history", [])
