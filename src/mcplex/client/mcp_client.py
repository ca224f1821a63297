"""Async MCP client for the streamable HTTP endpoint.

The client performs the initialize handshake, remembers the session id the
server returns in the ``mcp-session-id`` header, and sends it with every
later request. ``close()`` terminates the session with DELETE.
"""

import itertools
import logging
from typing import Any

import httpx

from mcplex import __version__
from mcplex.models.initialize import LATEST_PROTOCOL_VERSION, InitializeResult
from mcplex.models.tools import CallToolResult, ListToolsResult, ToolInfo

logger = logging.getLogger(__name__)

MCP_SESSION_ID_HEADER = "mcp-session-id"


class McpClientError(Exception):
    """The server answered with a JSON-RPC error or an unexpected status."""

    def __init__(self, message: str, code: int | None = None):
        self.code = code
        super().__init__(message)


class McpClient:
    """Client for one MCP session over streamable HTTP.

    Attributes:
        url: The MCP endpoint URL (e.g., "http://localhost:3001/mcp")
        session_id: Session id assigned by the server after connect()
        server_info: InitializeResult from the handshake
    """

    def __init__(
        self,
        url: str,
        client_name: str = "mcplex-chat",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        """Initialize the MCP client.

        Args:
            url: The MCP endpoint URL
            client_name: Name sent in the handshake
            http_client: Optional httpx client (e.g. bound to an ASGI app in tests)
            timeout: Request timeout when the client creates its own httpx client
        """
        self.url = url
        self.client_name = client_name
        self.session_id: str | None = None
        self.server_info: InitializeResult | None = None
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "McpClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json, text/event-stream"}
        if self.session_id:
            headers[MCP_SESSION_ID_HEADER] = self.session_id
        return headers

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        response = await self._http.post(self.url, json=payload, headers=self._headers())
        if response.status_code >= 400:
            try:
                error = response.json().get("error", {})
            except ValueError:
                error = {}
            raise McpClientError(
                error.get("message") or f"HTTP {response.status_code}: {response.text}",
                code=error.get("code"),
            )
        return response

    async def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a JSON-RPC request and return its result.

        Raises:
            McpClientError: If the server returns an error
        """
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": next(self._ids), "method": method}
        if params is not None:
            payload["params"] = params

        response = await self._post(payload)
        body = response.json()
        if "error" in body:
            error = body["error"]
            raise McpClientError(error.get("message", "Unknown error"), code=error.get("code"))
        return body.get("result", {})

    async def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a JSON-RPC notification."""
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            payload["params"] = params
        await self._post(payload)

    async def connect(self) -> InitializeResult:
        """Perform the initialize handshake and store the session id."""
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "initialize",
            "params": {
                "protocolVersion": LATEST_PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": self.client_name, "version": __version__},
            },
        }
        response = await self._post(payload)
        body = response.json()
        if "error" in body:
            raise McpClientError(body["error"].get("message", "Initialize failed"))

        self.session_id = response.headers.get(MCP_SESSION_ID_HEADER)
        self.server_info = InitializeResult.model_validate(body["result"])
        await self.notify("notifications/initialized")

        logger.info(
            f"Connected to {self.server_info.serverInfo.name} "
            f"(session {self.session_id}, protocol {self.server_info.protocolVersion})"
        )
        return self.server_info

    async def list_tools(self) -> list[ToolInfo]:
        result = await self.request("tools/list")
        return ListToolsResult.model_validate(result).tools

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> CallToolResult:
        """Call a tool; tool failures come back as a result with isError set."""
        result = await self.request("tools/call", {"name": name, "arguments": arguments or {}})
        return CallToolResult.model_validate(result)

    async def close(self) -> None:
        """Terminate the session and release the HTTP client."""
        try:
            if self.session_id:
                response = await self._http.delete(self.url, headers=self._headers())
                logger.debug(f"Session {self.session_id} terminated: {response.status_code}")
                self.session_id = None
        finally:
            if self._owns_http_client:
                await self._http.aclose()
