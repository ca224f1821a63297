"""Dispatcher: routes inbound messages to sessions.

For every (session id, message) pair the dispatcher either
- forwards to the existing session with that id,
- creates a session when there is no id and the message is an initialize
  request, or
- rejects with InvalidSession without touching any state.

Termination and transport closure both end in ``terminate()``, the single
removal path, so session cleanup runs at most once.
"""

import asyncio
import logging
from typing import Any

from mcplex import __version__
from mcplex.errors import InvalidSession
from mcplex.models.initialize import Implementation
from mcplex.models.jsonrpc import INVALID_REQUEST, error_response
from mcplex.sessions.session import DEFAULT_OUTBOUND_BUFFER, McpSession
from mcplex.sessions.table import SessionTable
from mcplex.sessions.types import DispatchResult
from mcplex.tools.execution import ToolExecutionService
from mcplex.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def is_initialize_request(message: Any) -> bool:
    """Check whether a decoded message is a JSON-RPC initialize request."""
    return (
        isinstance(message, dict)
        and message.get("jsonrpc") == "2.0"
        and message.get("method") == "initialize"
        and "id" in message
    )


class Dispatcher:
    """Owns the session table and routes requests to sessions.

    Each dispatcher has its own table, so several servers can coexist in one
    process (e.g. in tests).
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = "mcplex-server",
        server_version: str = __version__,
        tool_timeout: float | None = None,
        instructions: str | None = None,
        outbound_buffer: int = DEFAULT_OUTBOUND_BUFFER,
    ):
        """Initialize the Dispatcher.

        The registry is sealed here: it must be fully populated before the
        dispatcher serves its first request.

        Args:
            registry: Populated tool registry
            server_name: Server name reported during the handshake
            server_version: Server version reported during the handshake
            tool_timeout: Seconds a tool handler may run (None = no limit)
            instructions: Optional instructions sent to clients on initialize
            outbound_buffer: Per-session limit of queued server-initiated messages
        """
        registry.seal()
        self.registry = registry
        self.executor = ToolExecutionService(registry, timeout=tool_timeout)
        self.server_info = Implementation(name=server_name, version=server_version)
        self.instructions = instructions
        self.outbound_buffer = outbound_buffer
        self.sessions = SessionTable()

    # --- Session lifecycle ---

    def _create_session(self) -> McpSession:
        session_id = McpSession.generate_session_id()
        while session_id in self.sessions:
            session_id = McpSession.generate_session_id()

        session = McpSession(
            session_id=session_id,
            executor=self.executor,
            server_info=self.server_info,
            closer=self.terminate,
            instructions=self.instructions,
            outbound_buffer=self.outbound_buffer,
        )
        self.sessions.add(session)
        logger.info(f"Created new session {session_id}")
        return session

    def get_session(self, session_id: str | None) -> McpSession:
        """Look up an active session.

        Raises:
            InvalidSession: If the id is missing or not in the table
        """
        session = self.sessions.get(session_id) if session_id else None
        if session is None:
            raise InvalidSession(session_id)
        return session

    def terminate(self, session_id: str) -> bool:
        """Remove a session and run its cleanup.

        This is the only place sessions leave the table. A second call for the
        same id is a no-op.

        Returns:
            True if the session was removed, False if it was already gone
        """
        session = self.sessions.pop(session_id)
        if session is None:
            logger.debug(f"Session {session_id} already terminated")
            return False

        session.mark_closed()
        logger.info(f"Terminated session {session_id}")
        return True

    def close_all(self) -> int:
        """Report transport closure for every active session (server shutdown).

        Returns:
            Number of sessions closed
        """
        closed = 0
        for session in self.sessions:
            session.close()
            closed += 1
        if closed:
            logger.info(f"Closed {closed} active sessions")
        return closed

    # --- Request routing ---

    async def handle_post(self, session_id: str | None, message: Any) -> DispatchResult:
        """Route a POSTed JSON-RPC message or batch.

        Args:
            session_id: Value of the session header, if any
            message: Decoded JSON body

        Returns:
            DispatchResult with the bound session id and the response

        Raises:
            InvalidSession: If no session can be resolved and the message is
                not an initialize request
        """
        if session_id:
            session = self.sessions.get(session_id)
            if session is None:
                logger.warning(f"Rejected request for unknown session {session_id}")
                raise InvalidSession(session_id)
            response = await self._forward(session, message)
            return DispatchResult(session_id=session.session_id, response=response)

        if not is_initialize_request(message):
            logger.warning("Rejected request without session id")
            raise InvalidSession()

        session = self._create_session()
        response = await session.handle_message(message)

        if response is None or "error" in response:
            # A failed handshake does not leave an active session behind
            self.terminate(session.session_id)
            return DispatchResult(session_id=None, response=response)

        return DispatchResult(session_id=session.session_id, response=response)

    async def _forward(
        self, session: McpSession, message: Any
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        if not isinstance(message, list):
            return await session.handle_message(message)

        if not message:
            return error_response(None, INVALID_REQUEST, "Invalid Request: empty batch")

        responses = await asyncio.gather(
            *(session.handle_message(item) for item in message)
        )
        return [response for response in responses if response is not None] or None

    def send(self, session_id: str, message: dict[str, Any]) -> bool:
        """Push a server-initiated message to a session's stream.

        Raises:
            InvalidSession: If the session does not exist
        """
        return self.get_session(session_id).send(message)

    def __len__(self) -> int:
        return len(self.sessions)
