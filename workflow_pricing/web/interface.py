"""Web interface implementation for the Workflow Pricing Assistant."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from workflow_pricing.interfaces.base import PricingInterface
from workflow_pricing.interfaces.context import InterfaceContext
from workflow_pricing.interfaces.handlers import WorkflowHandler

# Get logger (setup handled by application entry point)
logger = logging.getLogger(__name__)


class WebInterface(PricingInterface):
    """Web interface implementation for Flask application."""

    def __init__(self, session_store=None, catalog=None):
        """
        Initialize Web interface.

        Args:
            session_store: Optional custom session store (defaults to InMemorySessionStore)
            catalog: Optional preloaded PricingCatalog (defaults to the configured one)
        """
        self.context = InterfaceContext(session_store, catalog=catalog)
        self.handler = WorkflowHandler()

    async def start(self, session_id: str) -> Dict[str, Any]:
        """Return the current question for a session, starting discovery if needed."""
        async with self.context as ctx:
            result = self.handler.handle_start(ctx, session_id)
            return self._without_history(result)

    async def chat_turn(self, session_id: str, message: Any) -> Dict[str, Any]:
        """
        Process a single discovery answer for Web API.

        Returns:
            JSON-compatible dictionary without the full history
        """
        async with self.context as ctx:
            result = await self.handler.handle_chat_turn(ctx, session_id, message)
            if result.get("is_done"):
                logger.debug(f"Session {session_id}: discovery complete")
            return self._without_history(result)

    async def estimate(
        self,
        session_id: str,
        currency: str = "USD",
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        async with self.context as ctx:
            return await self.handler.handle_estimate(ctx, session_id, currency, model)

    async def estimate_workload(self, payload: Mapping[str, Any], currency: str = "USD") -> Dict[str, Any]:
        """Price explicit workload fields without a session."""
        async with self.context as ctx:
            return self.handler.handle_direct_estimate(ctx, payload, currency)

    async def play_scenario(self, session_id: str, scenario_id: str) -> Dict[str, Any]:
        """Replay a scenario instantly; the browser paces the transcript itself."""
        async with self.context as ctx:
            result = await self.handler.handle_play_scenario(ctx, session_id, scenario_id)
            return result

    def list_scenarios(self) -> List[Dict[str, Any]]:
        return self.handler.list_scenarios()

    async def list_models(self) -> List[str]:
        async with self.context as ctx:
            return self.handler.list_models(ctx)

    async def reset_session(self, session_id: str) -> None:
        """
        Reset session state.

        Args:
            session_id: Unique identifier for the discovery session
        """
        await self.handler.handle_reset_session(self.context, session_id)

    async def get_session_history(self, session_id: str) -> list:
        history_dict = self.handler.get_session_history(self.context, session_id)
        return history_dict.get("history", [])

    @staticmethod
    def _without_history(result: Dict[str, Any]) -> Dict[str, Any]:
        # History is served separately by /api/history
        return {key: value for key, value in result.items() if key != "history"}
