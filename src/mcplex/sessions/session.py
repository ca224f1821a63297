"""McpSession: protocol state for one client.

A session is created by the dispatcher during the initialize handshake and
handles every later JSON-RPC message carrying its id. It holds:
- the negotiated protocol version and client info
- the pending tools/call tasks, keyed by request id, so they can be cancelled
- the outbound queue drained by the GET stream for server-initiated messages
"""

import asyncio
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from mcplex.errors import InvalidSession, StreamAlreadyAttached
from mcplex.models.initialize import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    Implementation,
    InitializeParams,
    InitializeResult,
)
from mcplex.models.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    SESSION_ERROR,
    error_response,
    success_response,
)
from mcplex.models.tools import CallToolParams, CallToolResult, ListToolsResult
from mcplex.tools.execution import ToolExecutionService

logger = logging.getLogger(__name__)

RequestId = str | int
RequestHandler = Callable[[RequestId, dict[str, Any]], Awaitable[dict[str, Any]]]

DEFAULT_OUTBOUND_BUFFER = 256


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class McpSession:
    """Server-side state bound to one client's sequence of requests."""

    def __init__(
        self,
        session_id: str,
        executor: ToolExecutionService,
        server_info: Implementation,
        closer: Callable[[str], bool] | None = None,
        instructions: str | None = None,
        outbound_buffer: int = DEFAULT_OUTBOUND_BUFFER,
    ):
        """Initialize a session.

        Args:
            session_id: Unique session identifier (32-char hex)
            executor: Tool execution service shared by all sessions
            server_info: Name and version reported in the handshake
            closer: Removal callback used when the transport reports closure;
                the dispatcher passes its own terminate()
            instructions: Optional usage instructions sent in the handshake
            outbound_buffer: Max server-initiated messages queued while no
                stream is attached
        """
        self.session_id = session_id
        self.executor = executor
        self.server_info = server_info
        self.instructions = instructions
        self.closed = False
        self.created_at = _utcnow()
        self.last_activity = self.created_at

        self.protocol_version: str | None = None
        self.client_info: Implementation | None = None
        self.client_capabilities: dict[str, Any] = {}
        self.initialized = False

        self.pending: dict[RequestId, asyncio.Task] = {}
        self.stream_attached = False
        self._outbound: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue(
            maxsize=outbound_buffer
        )
        self._cleanups: list[Callable[[], None]] = []
        self._closer = closer

        self._request_handlers: dict[str, RequestHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    @staticmethod
    def generate_session_id() -> str:
        """Generate a new unguessable session ID.

        Returns:
            32-character hexadecimal string (128 random bits)
        """
        return secrets.token_hex(16)

    # --- Message handling ---

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one JSON-RPC message.

        Args:
            message: A decoded JSON-RPC request, notification or response

        Returns:
            The JSON-RPC response, or None for notifications and responses
        """
        raw_id = message.get("id") if isinstance(message, dict) else None
        request_id = (
            raw_id
            if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool)
            else None
        )

        if self.closed:
            return error_response(request_id, SESSION_ERROR, "Session is closed")

        self.last_activity = _utcnow()

        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            return error_response(
                request_id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'"
            )

        if "method" in message and "id" in message and request_id is None:
            return error_response(
                None, INVALID_REQUEST, "Invalid Request: id must be a string or integer"
            )

        method = message.get("method")
        if method is None:
            if "result" in message or "error" in message:
                logger.debug(f"Session {self.session_id} received a client response")
                return None
            return error_response(
                request_id, INVALID_REQUEST, "Invalid Request: method is required"
            )

        params = message.get("params") or {}
        if not isinstance(params, dict):
            return error_response(
                request_id, INVALID_PARAMS, "Invalid params: params must be an object"
            )

        if "id" not in message:
            self._handle_notification(method, params)
            return None

        handler = self._request_handlers.get(method)
        if handler is None:
            logger.debug(f"Session {self.session_id}: unknown method {method}")
            return error_response(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        try:
            result = await handler(request_id, params)
        except PydanticValidationError as e:
            return error_response(
                request_id,
                INVALID_PARAMS,
                f"Invalid params for {method}",
                e.errors(include_url=False, include_context=False, include_input=False),
            )
        except _ProtocolError as e:
            return error_response(request_id, e.code, str(e))
        except Exception as e:
            logger.error(
                f"Session {self.session_id}: {method} failed: {e}", exc_info=True
            )
            return error_response(request_id, INTERNAL_ERROR, f"Internal error: {e}")

        return success_response(request_id, result)

    def _handle_notification(self, method: str, params: dict[str, Any]) -> None:
        if method == "notifications/initialized":
            self.initialized = True
            logger.debug(f"Session {self.session_id} initialized")
        elif method == "notifications/cancelled":
            self.cancel_request(params.get("requestId"))
        else:
            logger.debug(f"Session {self.session_id}: ignoring notification {method}")

    async def _initialize(self, request_id: RequestId, params: dict[str, Any]) -> dict[str, Any]:
        if self.protocol_version is not None:
            raise _ProtocolError(INVALID_REQUEST, "Session already initialized")

        request = InitializeParams.model_validate(params)
        if request.protocolVersion in SUPPORTED_PROTOCOL_VERSIONS:
            self.protocol_version = request.protocolVersion
        else:
            self.protocol_version = LATEST_PROTOCOL_VERSION
        self.client_info = request.clientInfo
        self.client_capabilities = request.capabilities

        client_name = request.clientInfo.name if request.clientInfo else "unknown"
        logger.info(
            f"Session {self.session_id} negotiated protocol {self.protocol_version} "
            f"with client {client_name}"
        )

        return InitializeResult(
            protocolVersion=self.protocol_version,
            capabilities={"tools": {"listChanged": False}},
            serverInfo=self.server_info,
            instructions=self.instructions,
        ).model_dump(exclude_none=True)

    async def _ping(self, request_id: RequestId, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _list_tools(self, request_id: RequestId, params: dict[str, Any]) -> dict[str, Any]:
        return ListToolsResult(tools=self.executor.list_tools()).model_dump()

    async def _call_tool(self, request_id: RequestId, params: dict[str, Any]) -> dict[str, Any]:
        call = CallToolParams.model_validate(params)
        if request_id in self.pending:
            raise _ProtocolError(INVALID_REQUEST, f"Request {request_id!r} is already in progress")

        task = asyncio.create_task(self.executor.call_tool(call.name, call.arguments))
        self.pending[request_id] = task
        try:
            result = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info(f"Session {self.session_id}: tool call {request_id} cancelled")
            result = CallToolResult.failure(f"Tool call '{call.name}' was cancelled")
        finally:
            if self.pending.get(request_id) is task:
                del self.pending[request_id]

        return result.model_dump()

    def cancel_request(self, request_id: RequestId | None) -> bool:
        """Cancel an in-flight tools/call by its request id.

        Returns:
            True if a pending call was cancelled
        """
        task = None
        if isinstance(request_id, (str, int)):
            task = self.pending.get(request_id)
        if task is None or task.done():
            logger.debug(f"Session {self.session_id}: nothing to cancel for {request_id}")
            return False
        task.cancel()
        return True

    # --- Server-initiated messages ---

    def send(self, message: dict[str, Any]) -> bool:
        """Queue a server-initiated message for the GET stream.

        Returns:
            False if the outbound buffer is full and the message was dropped

        Raises:
            InvalidSession: If the session is closed
        """
        if self.closed:
            raise InvalidSession(self.session_id)
        try:
            self._outbound.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(
                f"Session {self.session_id}: outbound buffer full, dropping message"
            )
            return False
        return True

    def open_stream(self) -> AsyncGenerator[dict[str, Any], None]:
        """Attach the single server-initiated message stream.

        Raises:
            InvalidSession: If the session is closed
            StreamAlreadyAttached: If a stream is already open
        """
        if self.closed:
            raise InvalidSession(self.session_id)
        if self.stream_attached:
            raise StreamAlreadyAttached(self.session_id)
        self.stream_attached = True
        return self._drain()

    async def _drain(self) -> AsyncGenerator[dict[str, Any], None]:
        try:
            while True:
                message = await self._outbound.get()
                if message is None:
                    break
                yield message
        finally:
            self.stream_attached = False
            logger.debug(f"Session {self.session_id}: stream detached")

    # --- Teardown ---

    def add_cleanup(self, callback: Callable[[], None]) -> None:
        """Register a callback run once when the session is removed."""
        self._cleanups.append(callback)

    def close(self) -> None:
        """Transport closure notification.

        Routes through the dispatcher's removal path so that cleanup runs at
        most once, whichever of termination or closure comes first.

        The HTTP binding reports closure only at server shutdown, through
        Dispatcher.close_all. Disconnecting the GET stream leaves the session
        open, and clients end it explicitly with DELETE.
        """
        if self._closer is not None:
            self._closer(self.session_id)
        else:
            self.mark_closed()

    def mark_closed(self) -> None:
        """Finalize the session after it left the session table.

        Cancels pending tool calls, ends the stream and runs cleanups.
        Only the dispatcher's removal path calls this.
        """
        if self.closed:
            return
        self.closed = True

        for task in self.pending.values():
            task.cancel()

        # Wake an attached stream; drop buffered messages if there is no room
        while True:
            try:
                self._outbound.put_nowait(None)
                break
            except asyncio.QueueFull:
                self._outbound.get_nowait()

        cleanups, self._cleanups = self._cleanups, []
        for callback in cleanups:
            try:
                callback()
            except Exception as e:
                logger.error(
                    f"Session {self.session_id}: cleanup callback failed: {e}",
                    exc_info=True,
                )


class _ProtocolError(Exception):
    """JSON-RPC level error raised by a request handler."""

    def __init__(self, code: int, message: str):
        self.code = code
        super().__init__(message)
