"""Configuration module for mcplex-server using pydantic-settings."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class McplexSettings(BaseSettings):
    """Main configuration settings for mcplex-server.

    All settings can be overridden via environment variables with the MCPLEX_ prefix.
    For example, MCPLEX_PORT will override the port setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3001
    server_name: str = "mcplex-server"
    instructions: str | None = None

    # Tool execution
    tool_timeout: float | None = 30.0
    http_timeout: float = 10.0
    file_search_max_results: int = Field(default=20, gt=0)
    omdb_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MCPLEX_OMDB_API_KEY", "OMDB_API_KEY"),
    )

    # Sessions
    outbound_buffer: int = 256

    # Chat client
    ollama_host: str = "http://localhost:11434"
    chat_model: str = "llama3.2"
    server_url: str = "http://localhost:3001/mcp"

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="MCPLEX_", populate_by_name=True)
