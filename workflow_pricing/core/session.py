"""Session storage abstractions for discovery sessions."""

import threading
from typing import Any, Dict, Optional

from .models import SessionData


class InMemorySessionStore:
    """Lightweight in-memory session store (dev use only)."""

    def __init__(self) -> None:
        """Initialize the in-memory session dictionary."""
        self._sessions: Dict[str, SessionData] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def get(self, session_id: str) -> Optional[SessionData]:
        """Return session data for a session id, if present."""
        return self._sessions.get(session_id)

    def set(self, session_id: str, data: SessionData) -> None:
        """Persist session data for the given session id."""
        self._sessions[session_id] = data

    def lock(self, session_id: str) -> threading.Lock:
        """
        Return the lock that serializes updates to one session.

        Hold it across a read-modify-write of the session's state so two
        answers are never applied to the same snapshot.
        """
        with self._locks_guard:
            return self._locks.setdefault(session_id, threading.Lock())

    def delete(self, session_id: str) -> None:
        """Remove a session if it exists in the store."""
        if session_id in self._sessions:
            del self._sessions[session_id]

    def clear(self) -> None:
        """Remove all sessions from the store."""
        self._sessions.clear()

    def snapshot(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Return the conversation snapshot for a session.

        Returns:
            {step, responses, extractedData} dictionary, or None if the session is unknown
        """
        data = self._sessions.get(session_id)
        if data is None:
            return None
        return data.state.to_dict()
