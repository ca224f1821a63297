"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from mcplex import __version__
from mcplex.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the current health status and version of the mcplex-server,
    along with the number of active sessions and registered tools.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    active_sessions = 0
    tool_count = 0

    if hasattr(request.app.state, "dispatcher"):
        dispatcher = request.app.state.dispatcher
        active_sessions = len(dispatcher.sessions)
        tool_count = len(dispatcher.registry)
        logger.debug(f"Health check: {active_sessions} sessions, {tool_count} tools")

    return HealthResponse(
        status="ok",
        version=__version__,
        active_sessions=active_sessions,
        tool_count=tool_count,
    )
