"""Unit tests for the FastAPI app factory and configuration."""

import pytest
from fastapi import FastAPI
from pydantic import ValidationError

from mcplex import __version__, create_app
from mcplex.config import McplexSettings
from mcplex.sessions import Dispatcher
from mcplex.tools import ToolRegistry


def test_create_app_returns_fastapi_instance():
    """Test that create_app returns a FastAPI instance."""
    app = create_app()
    assert isinstance(app, FastAPI)


def test_create_app_with_settings(test_settings):
    """Test that create_app accepts custom settings."""
    app = create_app(settings=test_settings)
    assert isinstance(app, FastAPI)
    assert app.state.settings is test_settings


def test_create_app_metadata():
    """Test that app has correct metadata."""
    app = create_app()
    assert app.title == "mcplex-server"
    assert app.version == "0.1.0"
    assert "streamable HTTP" in app.description


def test_create_app_includes_routes():
    """Test that health and MCP routes are registered."""
    app = create_app()

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    assert "/api/v1/health" in routes
    assert "/mcp" in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured and exposes the session header."""
    app = create_app(settings=test_settings)

    middleware = [m for m in app.user_middleware if m.cls.__name__ == "CORSMiddleware"]  # type: ignore[attr-defined]
    assert len(middleware) == 1
    assert "mcp-session-id" in middleware[0].kwargs["expose_headers"]


@pytest.mark.asyncio
async def test_lifespan_builds_dispatcher_with_builtin_tools(test_app):
    """Test that startup registers the built-in tools and seals the registry."""
    async with test_app.router.lifespan_context(test_app):
        dispatcher = test_app.state.dispatcher
        assert isinstance(dispatcher, Dispatcher)
        assert dispatcher.registry.sealed
        assert "adder" in dispatcher.registry
        assert "local-file-search" in dispatcher.registry
        assert dispatcher.executor.timeout == 5.0


@pytest.mark.asyncio
async def test_lifespan_uses_given_registry(test_settings, registry):
    """Test that a pre-populated registry replaces the built-in tools."""
    app = create_app(settings=test_settings, registry=registry)

    async with app.router.lifespan_context(app):
        assert app.state.dispatcher.registry is registry
        assert "news-by-topic" not in registry


@pytest.mark.asyncio
async def test_lifespan_shutdown_closes_sessions(test_settings, registry):
    """Test that shutdown terminates every active session."""
    app = create_app(settings=test_settings, registry=registry)

    async with app.router.lifespan_context(app):
        dispatcher = app.state.dispatcher
        session = dispatcher._create_session()
        http_client = app.state.http_client

    assert len(dispatcher) == 0
    assert session.closed
    assert http_client.is_closed


def test_version_constant():
    """Test that __version__ is defined and matches app version."""
    assert __version__ == "0.1.0"


def test_settings_default_values():
    """Test that settings have correct default values."""
    settings = McplexSettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 3001
    assert settings.server_name == "mcplex-server"
    assert settings.tool_timeout == 30.0
    assert settings.file_search_max_results == 20
    assert settings.ollama_host == "http://localhost:11434"
    assert settings.server_url == "http://localhost:3001/mcp"
    assert settings.log_level == "INFO"


def test_settings_env_prefix(monkeypatch):
    """Test that settings respect MCPLEX_ environment variable prefix."""
    monkeypatch.setenv("MCPLEX_PORT", "9000")
    monkeypatch.setenv("MCPLEX_TOOL_TIMEOUT", "2.5")

    settings = McplexSettings()

    assert settings.port == 9000
    assert settings.tool_timeout == 2.5


@pytest.mark.parametrize("value", ["0", "-5"])
def test_settings_reject_non_positive_search_cap(monkeypatch, value):
    """Test that the file search cap must be positive."""
    monkeypatch.setenv("MCPLEX_FILE_SEARCH_MAX_RESULTS", value)

    with pytest.raises(ValidationError):
        McplexSettings()


def test_settings_omdb_key_fallback(monkeypatch):
    """Test that the OMDb key is also read from the unprefixed variable."""
    monkeypatch.delenv("MCPLEX_OMDB_API_KEY", raising=False)
    monkeypatch.setenv("OMDB_API_KEY", "secret")

    settings = McplexSettings()

    assert settings.omdb_api_key == "secret"


def test_create_app_with_empty_registry(test_settings):
    """Test that an empty registry is accepted."""
    app = create_app(settings=test_settings, registry=ToolRegistry())
    assert app.state.registry is not None
