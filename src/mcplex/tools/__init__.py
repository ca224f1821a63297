"""Tool registry, input schemas, and tool execution.

This package provides the catalog of tools a session can call, the
declarative input schemas those tools are validated against, and the
execution service that turns every tool outcome into a CallToolResult.
"""

from mcplex.tools.execution import ToolExecutionService
from mcplex.tools.registry import ToolDescriptor, ToolEntry, ToolHandler, ToolRegistry
from mcplex.tools.schema import MISSING, InputSchema, Param, ValidationResult

__all__ = [
    "InputSchema",
    "MISSING",
    "Param",
    "ToolDescriptor",
    "ToolEntry",
    "ToolExecutionService",
    "ToolHandler",
    "ToolRegistry",
    "ValidationResult",
]
