"""MCP client and the Ollama chat loop built on it."""

from mcplex.client.chat import ChatLoop, to_ollama_tool
from mcplex.client.mcp_client import McpClient, McpClientError
from mcplex.client.ollama import OllamaClient

__all__ = ["ChatLoop", "McpClient", "McpClientError", "OllamaClient", "to_ollama_tool"]
