"""HTTP route handlers for Web API."""

import logging
from typing import Any, Dict, List

from workflow_pricing.shared.metrics import increment_errors
from workflow_pricing.web.interface import WebInterface
from workflow_pricing.web.models import ChatRequest, ChatResponse, EstimateRequest

# Get logger (setup handled by application entry point)
logger = logging.getLogger(__name__)


class WebHandlers:
    """Handlers for Web API endpoints."""

    def __init__(self, web_interface: WebInterface):
        """
        Initialize handlers.

        Args:
            web_interface: WebInterface instance for handling requests
        """
        self.interface = web_interface

    async def handle_question(self, session_id: str) -> Dict[str, Any]:
        """Return the current discovery question for the session."""
        result = await self.interface.start(session_id)
        return ChatResponse.from_result(result).to_dict()

    async def handle_chat(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Handle chat endpoint.

        Args:
            session_id: Unique session identifier
            payload: JSON body with a 'message' answer

        Returns:
            Dictionary with response, question, is_done, extracted_data, summary and optional error
        """
        request = ChatRequest.from_json(payload)
        logger.debug(f"Processing answer for session {session_id}")

        try:
            result = await self.interface.chat_turn(session_id, request.message)
            return ChatResponse.from_result(result).to_dict()
        except Exception as e:
            logger.error(f"Error in chat handler: {e}")
            increment_errors("chat_error", session_id)
            raise

    async def handle_estimate(self, session_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Handle estimate endpoint.

        An explicit 'workload' object is priced directly; otherwise the
        session's discovered workload is used.
        """
        request = EstimateRequest.from_json(payload)
        try:
            if request.workload is not None:
                workload = dict(request.workload)
                if request.model and "model" not in workload:
                    workload["model"] = request.model
                return await self.interface.estimate_workload(workload, request.currency)
            return await self.interface.estimate(session_id, request.currency, request.model)
        except Exception as e:
            logger.error(f"Error in estimate handler: {e}")
            increment_errors("estimate_error", session_id)
            raise

    def handle_scenarios(self) -> Dict[str, List[Dict[str, Any]]]:
        return {"scenarios": self.interface.list_scenarios()}

    async def handle_play_scenario(self, session_id: str, scenario_id: str) -> Dict[str, Any]:
        result = await self.interface.play_scenario(session_id, scenario_id)
        if "error" in result:
            return result
        history = await self.interface.get_session_history(session_id)
        return {**result, "conversation": history}

    async def handle_models(self) -> Dict[str, List[str]]:
        return {"models": await self.interface.list_models()}

    async def handle_reset(self, session_id: str) -> Dict[str, str]:
        """
        Handle reset endpoint.

        Args:
            session_id: Unique session identifier

        Returns:
            Status dictionary
        """
        await self.interface.reset_session(session_id)
        return {"status": "reset"}

    async def handle_history(self, session_id: str) -> Dict[str, Any]:
        """
        Handle history endpoint.

        Args:
            session_id: Unique session identifier

        Returns:
            Dictionary with history and step snapshot
        """
        return self.interface.handler.get_session_history(self.interface.context, session_id)
