"""mcplex-server: MCP tool server over streamable HTTP.

This package provides the session-and-dispatch layer that lets a language
model client discover and call schema-validated tools, plus a set of built-in
tools and a small chat client that routes tool output back to the model.
"""

__version__ = "0.1.0"

from mcplex.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
