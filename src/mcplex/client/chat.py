"""Interactive chat loop that lets an Ollama model call MCP tools.

Each user turn goes to the model together with the server's tool list. When
the model asks for a tool, the call is made over MCP and the joined text of
the result is what the user sees; it is also kept in the history as a
``tool`` message so the model can refer to it on later turns.
"""

import argparse
import asyncio
import logging
import sys
from typing import Any

from mcplex import __version__
from mcplex.client.mcp_client import McpClient, McpClientError
from mcplex.client.ollama import OllamaClient
from mcplex.config import McplexSettings
from mcplex.models.tools import ToolInfo

logger = logging.getLogger(__name__)

EXIT_COMMAND = "EXIT"


def to_ollama_tool(tool: ToolInfo) -> dict[str, Any]:
    """Convert an MCP tool description to Ollama's function-calling format."""
    schema = tool.inputSchema
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": schema.get("type", "object"),
                "properties": schema.get("properties", {}),
                "required": schema.get("required", []),
            },
        },
    }


class ChatLoop:
    """Conversation state shared between the model and the MCP session.

    Attributes:
        mcp: Connected MCP client
        ollama: Ollama client used for the model turns
        model: Model name
        history: Messages exchanged so far, in Ollama format
    """

    def __init__(self, mcp_client: McpClient, ollama_client: OllamaClient, model: str) -> None:
        self.mcp = mcp_client
        self.ollama = ollama_client
        self.model = model
        self.history: list[dict[str, Any]] = []
        self._tools: list[dict[str, Any]] | None = None

    async def load_tools(self) -> list[dict[str, Any]]:
        """Fetch the tool list once and cache it in function-calling form."""
        if self._tools is None:
            tools = await self.mcp.list_tools()
            self._tools = [to_ollama_tool(tool) for tool in tools]
            logger.info(f"Loaded {len(self._tools)} tools: {[t.name for t in tools]}")
        return self._tools

    async def ask(self, question: str) -> str:
        """Run one user turn and return the text to show.

        Args:
            question: The user's input

        Returns:
            str: The model's answer, or the tool output when the model called a tool
        """
        tools = await self.load_tools()
        self.history.append({"role": "user", "content": question})

        message = await self.ollama.chat(self.model, self.history, tools=tools)
        tool_calls = message.get("tool_calls") or []

        if not tool_calls:
            content = message.get("content") or ""
            self.history.append({"role": "assistant", "content": content})
            return content

        self.history.append(
            {"role": "assistant", "content": message.get("content") or "", "tool_calls": tool_calls}
        )

        outputs = []
        for call in tool_calls:
            function = call.get("function", {})
            name = function.get("name", "")
            arguments = function.get("arguments") or {}
            logger.debug(f"Model requested tool {name} with {arguments}")

            try:
                result = await self.mcp.call_tool(name, arguments)
                output = result.joined_text()
            except McpClientError as e:
                logger.warning(f"Tool call {name} failed: {e}")
                output = f"Error calling tool '{name}': {e}"

            self.history.append({"role": "tool", "content": output, "tool_name": name})
            outputs.append(output)

        return "\n".join(outputs)


async def run(settings: McplexSettings) -> None:
    """Connect to the server and Ollama, then chat until EXIT."""
    ollama_client = OllamaClient(host=settings.ollama_host)
    if not await ollama_client.check_connection():
        print(f"Cannot reach Ollama at {settings.ollama_host}", file=sys.stderr)
        return

    async with McpClient(settings.server_url) as mcp_client:
        print("Connected to MCP server")
        loop = ChatLoop(mcp_client, ollama_client, settings.chat_model)
        await loop.load_tools()

        print(f"\nWelcome to mcplex chat {__version__}!")
        print(f"Type {EXIT_COMMAND} to quit the chat.\n")

        while True:
            try:
                question = await asyncio.to_thread(input, "\n> You: ")
            except EOFError:
                break

            if question.strip().upper() == EXIT_COMMAND:
                break
            if not question.strip():
                continue

            answer = await loop.ask(question)
            print(f"AI: {answer}")

    print("\nExiting chat. Goodbye!")


def main() -> None:
    """Entry point for the mcplex-chat CLI."""
    parser = argparse.ArgumentParser(
        prog="mcplex-chat",
        description="Chat with an Ollama model that can call mcplex tools",
    )
    parser.add_argument("--version", action="version", version=f"mcplex-chat {__version__}")
    parser.add_argument("--server-url", type=str, default=None, help="MCP endpoint URL")
    parser.add_argument("--model", type=str, default=None, help="Ollama model name")
    parser.add_argument("--ollama-host", type=str, default=None, help="Ollama server URL")
    args = parser.parse_args()

    settings_kwargs = {}
    if args.server_url is not None:
        settings_kwargs["server_url"] = args.server_url
    if args.model is not None:
        settings_kwargs["chat_model"] = args.model
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host

    settings = McplexSettings(**settings_kwargs)
    logging.basicConfig(level=settings.log_level.upper())

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    sys.exit(main())
