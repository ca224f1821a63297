"""Pytest configuration for integration tests.

This module provides fixtures that drive the MCP endpoint over HTTP, so the
tests exercise the router, dispatcher and sessions together.
"""

import pytest_asyncio


@pytest_asyncio.fixture
async def session_id(async_client, initialize_message):
    """Perform the handshake over POST /mcp and return the assigned session id.

    Args:
        async_client: Async HTTP client bound to the test app
        initialize_message: Factory for initialize requests

    Returns:
        str: The value of the mcp-session-id response header
    """
    response = await async_client.post("/mcp", json=initialize_message())
    assert response.status_code == 200
    session_id = response.headers["mcp-session-id"]

    response = await async_client.post(
        "/mcp",
        json={"jsonrpc": "2.0", "method": "notifications/initialized"},
        headers={"mcp-session-id": session_id},
    )
    assert response.status_code == 202
    return session_id
