"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of mcplex-server.
        active_sessions: Number of sessions currently in the session table.
        tool_count: Number of registered tools.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of mcplex-server")
    active_sessions: int = Field(
        default=0,
        description="Number of active protocol sessions",
    )
    tool_count: int = Field(
        default=0,
        description="Number of registered tools",
    )
