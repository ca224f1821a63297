"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient used by
the chat loop. The client is created once and reused for every turn.
"""

import logging
from typing import Any

import ollama

logger = logging.getLogger(__name__)


def _to_dict(value: Any) -> dict[str, Any]:
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if isinstance(value, dict):
        return value
    return vars(value)


class OllamaClient:
    """Async client for interacting with the Ollama API.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Send one chat turn to Ollama and return the assistant message.

        Args:
            model: The model name to use for the chat
            messages: Conversation history in Ollama format
            tools: Optional function-calling tool definitions

        Returns:
            dict: The assistant message with ``role``, ``content`` and, when the
                  model wants a tool, ``tool_calls``

        Raises:
            Exception: If the Ollama API request fails
        """
        try:
            logger.debug(f"Sending {len(messages)} messages to model {model}")
            response = await self._client.chat(
                model=model,
                messages=messages,
                tools=tools,
                stream=False,
            )
        except Exception as e:
            logger.error(f"Chat request failed: {e}")
            raise

        response_dict = _to_dict(response)
        message = _to_dict(response_dict.get("message") or {})
        tool_calls = message.get("tool_calls") or []
        message["tool_calls"] = [_to_dict(call) for call in tool_calls]
        for call in message["tool_calls"]:
            call["function"] = _to_dict(call.get("function") or {})
        return message
