"""Pydantic models for the initialize handshake."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

LATEST_PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")


class Implementation(BaseModel):
    """Name and version of a client or server implementation."""

    name: str
    version: str

    model_config = ConfigDict(extra="allow")


class InitializeParams(BaseModel):
    """Params of an initialize request."""

    protocolVersion: str = LATEST_PROTOCOL_VERSION
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: Implementation | None = None

    model_config = ConfigDict(extra="allow")


class InitializeResult(BaseModel):
    """Result of an initialize request."""

    protocolVersion: str
    capabilities: dict[str, Any]
    serverInfo: Implementation
    instructions: str | None = None
