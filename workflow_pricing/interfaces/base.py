"""Abstract base class for interface implementations."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class PricingInterface(ABC):
    """Abstract base for different interface implementations (CLI, Web, API, etc.)."""

    @abstractmethod
    async def chat_turn(self, session_id: str, message: Any) -> Dict[str, Any]:
        """
        Answer the current discovery question.

        Args:
            session_id: Unique identifier for the discovery session
            message: Answer text, option label, list of option labels or number

        Returns:
            Dictionary with keys:
                - 'response': Next question prompt, or the workflow summary when done
                - 'question': Next question (id, prompt, kind, options) or None
                - 'is_done': Boolean indicating if discovery is complete
                - 'error': Error message if applicable
        """
        pass

    @abstractmethod
    async def estimate(
        self,
        session_id: str,
        currency: str = "USD",
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Price the workload gathered in a session.

        Args:
            session_id: Unique identifier for the discovery session
            currency: Currency code used for the formatted figures
            model: Optional model override

        Returns:
            Dictionary with keys:
                - 'breakdown': CostBreakdown fields, in credits
                - 'bands': Low/Medium/High volume projections
                - 'forecast': 12 monthly credit figures
                - 'formatted': Currency strings for display
                - 'error': Error message if applicable
        """
        pass

    @abstractmethod
    async def play_scenario(self, session_id: str, scenario_id: str) -> Dict[str, Any]:
        """
        Replay a demo scenario into the session.

        Args:
            session_id: Unique identifier for the discovery session
            scenario_id: Demo scenario identifier

        Returns:
            Dictionary with the completed discovery position or an 'error' key
        """
        pass

    @abstractmethod
    async def reset_session(self, session_id: str) -> None:
        """
        Reset session state, clearing history and discovered data.

        Args:
            session_id: Unique identifier for the discovery session
        """
        pass

    @abstractmethod
    async def get_session_history(self, session_id: str) -> list:
        """
        Get the conversation history for a session.

        Args:
            session_id: Unique identifier for the discovery session

        Returns:
            List of messages (dict with 'role' and 'content')
        """
        pass
