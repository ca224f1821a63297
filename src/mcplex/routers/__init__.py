"""FastAPI routers for API endpoints.

This package contains the MCP transport endpoint and the health check.
"""

from mcplex.routers import health, mcp

__all__ = [
    "health",
    "mcp",
]
