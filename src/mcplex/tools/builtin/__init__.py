"""Built-in tools served by mcplex-server."""

import httpx

from mcplex.config import McplexSettings
from mcplex.tools.builtin.basic import register_basic_tools
from mcplex.tools.builtin.files import register_file_tools
from mcplex.tools.builtin.web import register_web_tools
from mcplex.tools.registry import ToolRegistry


def register_builtin_tools(
    registry: ToolRegistry,
    http_client: httpx.AsyncClient,
    settings: McplexSettings,
) -> None:
    """Register every built-in tool, in menu order."""
    register_basic_tools(registry)
    register_web_tools(registry, http_client, omdb_api_key=settings.omdb_api_key)
    register_file_tools(registry, max_results=settings.file_search_max_results)


__all__ = ["register_builtin_tools"]
