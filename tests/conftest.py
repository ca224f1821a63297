"""Pytest configuration and shared fixtures for mcplex-server tests.

This module provides common fixtures used across all test modules,
including a small tool registry, test app creation and async client setup.
"""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mcplex import create_app
from mcplex.config import McplexSettings
from mcplex.errors import ToolExecutionError
from mcplex.models.tools import text
from mcplex.sessions import Dispatcher
from mcplex.tools import Param, ToolRegistry

PROTOCOL_VERSION = "2025-06-18"


def _initialize_message(request_id=1, protocol_version=PROTOCOL_VERSION):
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": protocol_version,
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "1.0.0"},
        },
    }


@pytest.fixture
def initialize_message():
    """Factory building an initialize request as a client would send it."""
    return _initialize_message


@pytest.fixture
def test_settings():
    """Create test settings.

    Returns:
        McplexSettings: Settings instance configured for testing.
    """
    return McplexSettings(
        host="127.0.0.1",
        port=3001,
        tool_timeout=5.0,
        http_timeout=5.0,
        omdb_api_key=None,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def registry():
    """Create a registry with a few deterministic tools.

    Returns:
        ToolRegistry: Unsealed registry holding adder, echo, boom and sleepy.
    """
    registry = ToolRegistry()

    @registry.tool(
        "adder",
        "Add two numbers together",
        Param("a", "number", "The first number"),
        Param("b", "number", "The second number"),
    )
    async def adder(args):
        return [text(f"Result: The sum of {args['a']} and {args['b']} is {args['a'] + args['b']}.")]

    @registry.tool(
        "echo",
        "Echo the message back",
        Param("message", "string"),
        Param("times", "integer", default=1),
    )
    async def echo(args):
        return [text(args["message"]) for _ in range(args["times"])]

    @registry.tool("boom", "Always fails")
    async def boom(args):
        raise ToolExecutionError("boom")

    @registry.tool("sleepy", "Sleeps for a while", Param("seconds", "number", default=10))
    async def sleepy(args):
        await asyncio.sleep(args["seconds"])
        return [text("woke up")]

    return registry


@pytest.fixture
def dispatcher(registry):
    """Create a Dispatcher over the test registry."""
    return Dispatcher(registry, server_name="test-server", tool_timeout=5.0)


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance with the built-in tools.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
