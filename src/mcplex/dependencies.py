"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
routers to inject common dependencies like settings and the dispatcher.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from mcplex.config import McplexSettings
from mcplex.sessions import Dispatcher


@lru_cache
def get_settings() -> McplexSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the MCPLEX_ prefix.

    Returns:
        McplexSettings: The application configuration settings.
    """
    return McplexSettings()


def get_dispatcher(request: Request) -> Dispatcher:
    """Get the Dispatcher from app state.

    The dispatcher (and with it the session table and tool registry) is
    created once during application startup.

    Args:
        request: The FastAPI request object.

    Returns:
        Dispatcher: The application's dispatcher.

    Raises:
        HTTPException: If the dispatcher is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "dispatcher"):
        raise HTTPException(
            status_code=503,
            detail="Dispatcher not initialized",
        )
    return request.app.state.dispatcher
