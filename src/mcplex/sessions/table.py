"""Session table: active sessions keyed by session id.

None of these methods await, so on the single event loop every insert, lookup
and removal is atomic with respect to other requests.
"""

import logging
from typing import Iterator

from mcplex.sessions.session import McpSession

logger = logging.getLogger(__name__)


class SessionTable:
    """Mapping from session id to active McpSession."""

    def __init__(self) -> None:
        self._sessions: dict[str, McpSession] = {}

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[McpSession]:
        return iter(list(self._sessions.values()))

    def add(self, session: McpSession) -> None:
        """Insert a new session.

        Raises:
            ValueError: If the session id is already in the table
        """
        if session.session_id in self._sessions:
            raise ValueError(f"Session {session.session_id} already exists")
        self._sessions[session.session_id] = session

    def get(self, session_id: str) -> McpSession | None:
        return self._sessions.get(session_id)

    def pop(self, session_id: str) -> McpSession | None:
        """Remove and return a session; None if it was already removed."""
        return self._sessions.pop(session_id, None)

    def ids(self) -> list[str]:
        return list(self._sessions)
