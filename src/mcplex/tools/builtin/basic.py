"""Local tools that need no network access: adder, print-menu, truth_table."""

import logging
from typing import Any

from mcplex.errors import ToolExecutionError
from mcplex.models.tools import TextContent, text
from mcplex.tools.builtin.boolean import BooleanExpression
from mcplex.tools.registry import ToolRegistry
from mcplex.tools.schema import Param

logger = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


async def adder(args: dict[str, Any]) -> list[TextContent]:
    a, b = args["a"], args["b"]
    logger.info(f"Adding {a} and {b}")
    total = a + b
    return [
        text(
            f"Result: The sum of {_format_number(a)} and {_format_number(b)} "
            f"is {_format_number(total)}."
        )
    ]


async def print_menu(args: dict[str, Any]) -> list[TextContent]:
    title = args.get("title")
    items: list[str] = args["items"]

    header = f"{title}\n\n" if title else ""
    menu = "\n".join(f"({index}) {item}" for index, item in enumerate(items, start=1))
    return [text(f"{header}{menu}")]


async def truth_table(args: dict[str, Any]) -> list[TextContent]:
    try:
        expression = BooleanExpression(args["expression"])
    except ValueError as e:
        raise ToolExecutionError(f"Invalid boolean expression. {e}") from e

    variables = expression.variables
    rows = expression.truth_table()

    columns = [*variables, "Result"]
    header = " | ".join(columns)
    lines = [header, "-" * len(header)]
    for assignment, result in rows:
        cells = ["T" if assignment[name] else "F" for name in variables]
        cells.append("T" if result else "F")
        lines.append(
            " | ".join(cell.center(len(column)) for cell, column in zip(cells, columns))
        )

    return [text("Truth Table:\n" + "\n".join(lines))]


def register_basic_tools(registry: ToolRegistry) -> None:
    """Register the local tools on a registry."""
    registry.tool(
        "print-menu",
        "Prints what the MCP server can do with the available tools, gives "
        "a description of each tool (apart from printing this menu)",
        Param("title", "string", "Optional title for the menu", required=False),
        Param(
            "items",
            "array",
            "List of tool descriptions to display",
            items="string",
        ),
    )(print_menu)

    registry.tool(
        "adder",
        "Add two numbers together",
        Param("a", "number", "The first number"),
        Param("b", "number", "The second number"),
    )(adder)

    registry.tool(
        "truth_table",
        "Generate the truth table of a boolean expression (e.g., A && !B || C)",
        Param(
            "expression",
            "string",
            "Boolean expression using variables like A, B, C and operators like &&, ||, !",
        ),
    )(truth_table)
