"""Tool execution: resolve, validate, invoke, and wrap the outcome.

Everything that can go wrong inside a tool invocation is turned into a
``CallToolResult`` with ``isError`` set. Nothing here raises to the caller
except task cancellation.
"""

import asyncio
import logging
from typing import Any

from mcplex.errors import ToolExecutionError, UnknownTool, ValidationError
from mcplex.models.tools import CallToolResult, TextContent, ToolInfo
from mcplex.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolExecutionService:
    """Runs tool calls against a registry.

    Attributes:
        registry: The tool registry to resolve names against
        timeout: Seconds a handler may run before it is cancelled (None = no limit)
    """

    def __init__(self, registry: ToolRegistry, timeout: float | None = None):
        self.registry = registry
        self.timeout = timeout

    def list_tools(self) -> list[ToolInfo]:
        """Return the tools/list payload in registration order."""
        return [descriptor.to_info() for descriptor in self.registry.list_tools()]

    async def call_tool(self, name: str, arguments: Any) -> CallToolResult:
        """Call a tool and wrap its outcome.

        Args:
            name: The requested tool name
            arguments: Raw arguments from the request

        Returns:
            CallToolResult with the handler's content, or a single failure block
        """
        try:
            entry = self.registry.resolve(name)
        except UnknownTool as e:
            logger.warning(f"Call to unknown tool '{name}'")
            return CallToolResult.failure(str(e))

        try:
            validated = entry.descriptor.input_schema.validate(arguments).raise_for_errors()
        except ValidationError as e:
            logger.warning(f"Invalid arguments for tool '{name}': {e}")
            return CallToolResult.failure(f"Invalid arguments for tool '{name}': {e}")

        logger.info(f"Executing tool '{name}'")
        logger.debug(f"Tool '{name}' arguments: {validated}")

        try:
            content = await self._invoke(name, entry.handler, validated)
        except ToolExecutionError as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return CallToolResult.failure(f"Error executing tool '{name}': {e}")
        except Exception as e:
            logger.error(f"Tool '{name}' raised: {e}", exc_info=True)
            return CallToolResult.failure(f"Error executing tool '{name}': {e}")

        logger.debug(f"Tool '{name}' returned {len(content)} content blocks")
        return CallToolResult(content=content)

    async def _invoke(self, name: str, handler, arguments: dict[str, Any]) -> list[TextContent]:
        try:
            if self.timeout is None:
                content = await handler(arguments)
            else:
                content = await asyncio.wait_for(handler(arguments), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ToolExecutionError(
                f"timed out after {self.timeout:g} seconds"
            ) from None

        blocks = list(content)
        for block in blocks:
            if not isinstance(block, TextContent):
                raise ToolExecutionError(
                    f"Tool '{name}' returned unsupported content: {type(block).__name__}"
                )
        return blocks
