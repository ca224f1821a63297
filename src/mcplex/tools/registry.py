"""Tool registry mapping tool names to descriptors and async handlers.

The registry is populated once at startup and sealed before the dispatcher
accepts requests. After that it is only read, so it needs no locking.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from mcplex.errors import DuplicateToolName, UnknownTool
from mcplex.models.tools import TextContent, ToolInfo
from mcplex.tools.schema import InputSchema, Param

logger = logging.getLogger(__name__)

# Async tool handler: validated arguments -> content blocks
ToolHandler = Callable[[dict[str, Any]], Awaitable[Sequence[TextContent]]]


@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description and input schema of a tool."""

    name: str
    description: str
    input_schema: InputSchema

    def to_info(self) -> ToolInfo:
        """Convert to the tools/list wire model."""
        return ToolInfo(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema.to_json_schema(),
        )


@dataclass(frozen=True)
class ToolEntry:
    """A registered tool: descriptor plus handler."""

    descriptor: ToolDescriptor
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.descriptor.name


class ToolRegistry:
    """Catalog of available tools, in registration order."""

    def __init__(self) -> None:
        self._entries: dict[str, ToolEntry] = {}
        self._sealed = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Freeze the registry; later registrations raise RuntimeError."""
        if not self._sealed:
            self._sealed = True
            logger.info(f"Tool registry sealed with {len(self._entries)} tools")

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """Register a tool.

        Args:
            descriptor: The tool's name, description and input schema
            handler: Async function taking validated arguments

        Raises:
            DuplicateToolName: If a tool with the same name is already registered
            RuntimeError: If the registry has been sealed
        """
        if self._sealed:
            raise RuntimeError(
                f"Cannot register tool '{descriptor.name}': registry is sealed"
            )
        if descriptor.name in self._entries:
            raise DuplicateToolName(descriptor.name)

        self._entries[descriptor.name] = ToolEntry(descriptor=descriptor, handler=handler)
        logger.debug(f"Registered tool: {descriptor.name}")

    def tool(
        self, name: str, description: str, *params: Param
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator registering an async function as a tool.

        Example:
            >>> @registry.tool("adder", "Add two numbers", Param("a", "number"),
            ...                Param("b", "number"))
            ... async def adder(args):
            ...     return [text(str(args["a"] + args["b"]))]
        """

        def decorator(handler: ToolHandler) -> ToolHandler:
            descriptor = ToolDescriptor(
                name=name,
                description=description,
                input_schema=InputSchema(*params),
            )
            self.register(descriptor, handler)
            return handler

        return decorator

    def resolve(self, name: str) -> ToolEntry:
        """Look up a tool by name.

        Raises:
            UnknownTool: If no tool with this name is registered
        """
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownTool(name) from None

    def list_tools(self) -> list[ToolDescriptor]:
        """Return all descriptors in registration order."""
        return [entry.descriptor for entry in self._entries.values()]
