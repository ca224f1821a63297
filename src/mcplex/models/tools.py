"""Pydantic models for tool listing and tool call results."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TextContent(BaseModel):
    """A text content block in a tool result."""

    type: Literal["text"] = "text"
    text: str = Field(..., description="The text content")


def text(value: str) -> TextContent:
    """Build a text content block."""
    return TextContent(text=value)


class CallToolResult(BaseModel):
    """Result of a tools/call request.

    Tool-level failures are reported here with ``isError`` set instead of as
    JSON-RPC errors, so the model can read the failure description.
    """

    content: list[TextContent] = Field(default_factory=list)
    isError: bool = Field(
        default=False, description="Whether the tool call failed"
    )

    @classmethod
    def failure(cls, message: str) -> "CallToolResult":
        """Build a result holding a single failure text block."""
        return cls(content=[text(message)], isError=True)

    def joined_text(self, separator: str = " ") -> str:
        """Join all text blocks into one string."""
        return separator.join(block.text for block in self.content)


class ToolInfo(BaseModel):
    """A tool as advertised by tools/list."""

    name: str
    description: str
    inputSchema: dict[str, Any]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "adder",
                "description": "Add two numbers together",
                "inputSchema": {
                    "type": "object",
                    "properties": {
                        "a": {"type": "number", "description": "The first number"},
                        "b": {"type": "number", "description": "The second number"},
                    },
                    "required": ["a", "b"],
                },
            }
        }
    )


class ListToolsResult(BaseModel):
    """Result of a tools/list request."""

    tools: list[ToolInfo]


class CallToolParams(BaseModel):
    """Params of a tools/call request."""

    name: str
    arguments: Any = None
