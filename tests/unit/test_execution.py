"""Unit tests for the ToolExecutionService."""

import pytest

from mcplex.tools import ToolExecutionService


@pytest.fixture
def executor(registry):
    """Create an execution service over the test registry."""
    return ToolExecutionService(registry, timeout=5.0)


@pytest.mark.asyncio
async def test_call_tool_success(executor):
    """Test a successful call returns the handler's content."""
    result = await executor.call_tool("adder", {"a": 2, "b": 3})

    assert result.isError is False
    assert len(result.content) == 1
    assert "5" in result.content[0].text


@pytest.mark.asyncio
async def test_call_tool_applies_defaults(executor):
    """Test that defaults reach the handler."""
    result = await executor.call_tool("echo", {"message": "hi"})

    assert [block.text for block in result.content] == ["hi"]


@pytest.mark.asyncio
async def test_call_tool_multiple_blocks(executor):
    """Test that all blocks are returned in order."""
    result = await executor.call_tool("echo", {"message": "hi", "times": 3})

    assert result.joined_text() == "hi hi hi"


@pytest.mark.asyncio
async def test_unknown_tool_is_failure_result(executor):
    """Test that an unknown tool becomes a failure result, not an exception."""
    result = await executor.call_tool("nope", {})

    assert result.isError is True
    assert result.content[0].text == "Unknown tool: nope"


@pytest.mark.asyncio
async def test_invalid_arguments_is_failure_result(executor):
    """Test that a missing required argument never reaches the handler."""
    result = await executor.call_tool("adder", {"a": 2})

    assert result.isError is True
    assert result.content[0].text == (
        "Invalid arguments for tool 'adder': Missing required argument 'b'"
    )


@pytest.mark.asyncio
async def test_invalid_arguments_reports_every_error(executor):
    """Test that all schema violations are joined into one failure block."""
    result = await executor.call_tool("adder", {})

    assert result.isError is True
    assert len(result.content) == 1
    assert result.content[0].text == (
        "Invalid arguments for tool 'adder': "
        "Missing required argument 'a'; Missing required argument 'b'"
    )


@pytest.mark.asyncio
async def test_handler_error_is_failure_result(executor):
    """Test that a handler failure is described in the result."""
    result = await executor.call_tool("boom", {})

    assert result.isError is True
    assert len(result.content) == 1
    assert "boom" in result.content[0].text


@pytest.mark.asyncio
async def test_unexpected_exception_is_failure_result(registry):
    """Test that any exception from a handler is caught."""

    @registry.tool("crash", "Raises KeyError")
    async def crash(args):
        raise KeyError("missing")

    result = await ToolExecutionService(registry).call_tool("crash", {})

    assert result.isError is True
    assert result.content[0].text.startswith("Error executing tool 'crash'")


@pytest.mark.asyncio
async def test_timeout_is_failure_result(registry):
    """Test that a slow handler is cut off by the timeout."""
    executor = ToolExecutionService(registry, timeout=0.05)

    result = await executor.call_tool("sleepy", {"seconds": 5})

    assert result.isError is True
    assert "timed out after 0.05 seconds" in result.content[0].text


@pytest.mark.asyncio
async def test_non_text_content_is_failure_result(registry):
    """Test that handlers must return text blocks."""

    @registry.tool("bad", "Returns a dict")
    async def bad(args):
        return [{"type": "image"}]

    result = await ToolExecutionService(registry).call_tool("bad", {})

    assert result.isError is True
    assert "unsupported content" in result.content[0].text


def test_list_tools(executor):
    """Test that tools/list payload follows registration order."""
    names = [tool.name for tool in executor.list_tools()]

    assert names == ["adder", "echo", "boom", "sleepy"]
