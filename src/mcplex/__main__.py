"""CLI entry point for mcplex-server.

This module provides the command-line interface for starting the mcplex-server.
It can be invoked as `mcplex-server` (via the script entry point) or
`python -m mcplex`.
"""

import argparse
import logging
import sys

import uvicorn

from mcplex import __version__, create_app
from mcplex.config import McplexSettings


def main() -> None:
    """Main entry point for the mcplex-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="mcplex-server",
        description="MCP tool server with session-bound dispatch over streamable HTTP",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"mcplex-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via MCPLEX_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 3001, can be set via MCPLEX_PORT)",
    )

    parser.add_argument(
        "--tool-timeout",
        type=float,
        default=None,
        help="Seconds a tool may run before it fails (default: 30, can be set via MCPLEX_TOOL_TIMEOUT)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via MCPLEX_LOG_LEVEL)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.tool_timeout is not None:
        settings_kwargs["tool_timeout"] = args.tool_timeout
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = McplexSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Create the FastAPI app
    app = create_app(settings=settings)

    # Start uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
