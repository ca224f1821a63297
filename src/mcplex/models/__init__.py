"""Pydantic models for protocol messages and API responses.

This package contains the wire models shared by the server's dispatch layer,
the HTTP transport, and the bundled MCP client.
"""

from mcplex.models.health import HealthResponse
from mcplex.models.initialize import (
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    Implementation,
    InitializeParams,
    InitializeResult,
)
from mcplex.models.jsonrpc import JSONRPCError, JSONRPCErrorResponse
from mcplex.models.tools import (
    CallToolParams,
    CallToolResult,
    ListToolsResult,
    TextContent,
    ToolInfo,
    text,
)

__all__ = [
    "CallToolParams",
    "CallToolResult",
    "HealthResponse",
    "Implementation",
    "InitializeParams",
    "InitializeResult",
    "JSONRPCError",
    "JSONRPCErrorResponse",
    "LATEST_PROTOCOL_VERSION",
    "ListToolsResult",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "TextContent",
    "ToolInfo",
    "text",
]
