"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mcplex import __version__
from mcplex.config import McplexSettings
from mcplex.routers import health, mcp
from mcplex.routers.mcp import MCP_SESSION_ID_HEADER
from mcplex.sessions import Dispatcher
from mcplex.tools import ToolRegistry
from mcplex.tools.builtin import register_builtin_tools

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    On startup the shared HTTP client is created, the tool registry is
    populated and the dispatcher is built; the dispatcher seals the registry,
    so no tool can be added once requests are served. On shutdown every
    active session is closed before the HTTP client.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: McplexSettings = app.state.settings

    app.state.http_client = httpx.AsyncClient(
        timeout=settings.http_timeout,
        headers={"User-Agent": f"mcplex-server/{__version__}"},
    )

    registry: ToolRegistry | None = app.state.registry
    if registry is None:
        registry = ToolRegistry()
        register_builtin_tools(registry, app.state.http_client, settings)

    app.state.dispatcher = Dispatcher(
        registry,
        server_name=settings.server_name,
        tool_timeout=settings.tool_timeout,
        instructions=settings.instructions,
        outbound_buffer=settings.outbound_buffer,
    )
    logger.info(f"Serving {len(registry)} tools")

    yield

    # Shutdown: close sessions, then shared resources
    app.state.dispatcher.close_all()
    await app.state.http_client.aclose()
    logger.info("HTTP client closed")


def create_app(
    settings: McplexSettings | None = None,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a FastAPI instance with all routers,
    middleware, and configuration applied.

    Args:
        settings: Optional McplexSettings instance. If not provided,
                  settings will be loaded from environment variables.
        registry: Optional pre-populated tool registry. If not provided,
                  the built-in tools are registered at startup.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from mcplex.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="mcplex-server",
        description="MCP tool server with session-bound dispatch over streamable HTTP",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings and registry in app.state for lifespan access
    app.state.settings = settings
    app.state.registry = registry

    # Configure CORS
    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[MCP_SESSION_ID_HEADER],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(mcp.router)

    return app
