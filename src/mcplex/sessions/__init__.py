"""Session and dispatch layer for mcplex-server.

This package provides the per-client protocol session, the table of active
sessions, and the dispatcher that binds requests to sessions.
"""

from mcplex.sessions.dispatcher import Dispatcher, is_initialize_request
from mcplex.sessions.session import McpSession
from mcplex.sessions.table import SessionTable
from mcplex.sessions.types import DispatchResult

__all__ = [
    "DispatchResult",
    "Dispatcher",
    "McpSession",
    "SessionTable",
    "is_initialize_request",
]
