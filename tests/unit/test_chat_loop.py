"""Unit tests for the chat loop that routes model tool calls over MCP."""

from unittest.mock import AsyncMock

import pytest

from mcplex.client import ChatLoop, McpClientError, to_ollama_tool
from mcplex.models.tools import CallToolResult, ToolInfo, text

ADDER = ToolInfo(
    name="adder",
    description="Add two numbers together",
    inputSchema={
        "type": "object",
        "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
        "required": ["a", "b"],
    },
)


@pytest.fixture
def mcp_client():
    """Create a mock MCP client exposing the adder tool."""
    client = AsyncMock()
    client.list_tools.return_value = [ADDER]
    client.call_tool.return_value = CallToolResult(
        content=[text("Result: The sum of 2 and 3 is 5.")]
    )
    return client


@pytest.fixture
def ollama_client():
    """Create a mock OllamaClient."""
    return AsyncMock()


def test_to_ollama_tool():
    """Test conversion to the function-calling format."""
    tool = to_ollama_tool(ADDER)

    assert tool == {
        "type": "function",
        "function": {
            "name": "adder",
            "description": "Add two numbers together",
            "parameters": {
                "type": "object",
                "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                "required": ["a", "b"],
            },
        },
    }


@pytest.mark.asyncio
async def test_plain_answer(mcp_client, ollama_client):
    """Test a turn where the model answers directly."""
    ollama_client.chat.return_value = {"role": "assistant", "content": "Hi there", "tool_calls": []}
    loop = ChatLoop(mcp_client, ollama_client, "llama3.2")

    answer = await loop.ask("Hello")

    assert answer == "Hi there"
    assert loop.history == [
        {"role": "user", "content": "Hello"},
        {"role": "assistant", "content": "Hi there"},
    ]
    mcp_client.call_tool.assert_not_awaited()


@pytest.mark.asyncio
async def test_tool_call_turn(mcp_client, ollama_client):
    """Test that a requested tool is called and its text becomes the answer."""
    tool_calls = [{"function": {"name": "adder", "arguments": {"a": 2, "b": 3}}}]
    ollama_client.chat.return_value = {"role": "assistant", "content": "", "tool_calls": tool_calls}
    loop = ChatLoop(mcp_client, ollama_client, "llama3.2")

    answer = await loop.ask("What is 2 + 3?")

    assert answer == "Result: The sum of 2 and 3 is 5."
    mcp_client.call_tool.assert_awaited_once_with("adder", {"a": 2, "b": 3})
    assert loop.history[-1] == {
        "role": "tool",
        "content": "Result: The sum of 2 and 3 is 5.",
        "tool_name": "adder",
    }
    assert loop.history[-2]["tool_calls"] == tool_calls


@pytest.mark.asyncio
async def test_tool_list_is_fetched_once(mcp_client, ollama_client):
    """Test that the tool list is cached across turns."""
    ollama_client.chat.return_value = {"role": "assistant", "content": "ok", "tool_calls": []}
    loop = ChatLoop(mcp_client, ollama_client, "llama3.2")

    await loop.ask("one")
    await loop.ask("two")

    mcp_client.list_tools.assert_awaited_once()
    _, kwargs = ollama_client.chat.call_args
    assert kwargs["tools"][0]["function"]["name"] == "adder"


@pytest.mark.asyncio
async def test_tool_call_error_is_reported(mcp_client, ollama_client):
    """Test that a protocol error during a tool call is shown, not raised."""
    tool_calls = [{"function": {"name": "adder", "arguments": {"a": 2, "b": 3}}}]
    ollama_client.chat.return_value = {"role": "assistant", "content": "", "tool_calls": tool_calls}
    mcp_client.call_tool.side_effect = McpClientError("Bad Request: No valid session ID provided")
    loop = ChatLoop(mcp_client, ollama_client, "llama3.2")

    answer = await loop.ask("What is 2 + 3?")

    assert answer.startswith("Error calling tool 'adder'")
