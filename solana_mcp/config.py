"""Process configuration for the Solana MCP server.

Uses pydantic-settings for environment variable loading and validation.
Values come from the environment or a local ``.env`` file. Per-connection
custody credentials are never read from here; they arrive as request headers.
"""

from enum import Enum

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.exceptions import MissingEnvironmentError


class TransportMode(str, Enum):
    """How MCP messages reach the server."""

    STDIO = "stdio"
    SSE = "sse"


class Settings(BaseSettings):
    """Settings for the MCP server.

    Environment variables:
        SOLANA_PRIVATE_KEY: Base58 secret key (required in stdio mode)
        RPC_URL: Solana JSON-RPC endpoint (required)
        PORT: HTTP port; selects SSE mode when MCP_TRANSPORT is unset
        HOST: HTTP bind address
        MCP_TRANSPORT: Explicit transport mode (stdio or sse)
        OPENAI_API_KEY: Passed through to actions
        PRIVY_API_URL: Base URL of the Privy wallet API
        CUSTODY_TIMEOUT: Custody backend request timeout in seconds
        RPC_TIMEOUT: Solana RPC request timeout in seconds
        LOG_LEVEL: Logging level
        LOG_JSON: Enable JSON log format
        OTEL_ENABLED: Enable OpenTelemetry
        OTEL_ENDPOINT: OTLP collector endpoint
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Solana
    solana_private_key: str | None = Field(
        default=None,
        description="Base58-encoded secret key used in stdio mode",
    )
    rpc_url: str | None = Field(
        default=None,
        description="Solana JSON-RPC endpoint",
    )
    rpc_timeout: float = Field(
        default=30.0,
        description="Solana RPC request timeout in seconds",
    )

    # Transport
    transport: TransportMode | None = Field(
        default=None,
        validation_alias=AliasChoices("mcp_transport", "transport"),
        description="Explicit transport mode; derived from PORT when unset",
    )
    port: int | None = Field(
        default=None,
        description="HTTP port for SSE mode",
    )
    host: str = Field(
        default="0.0.0.0",
        description="HTTP bind address for SSE mode",
    )
    sse_buffer_size: int = Field(
        default=32,
        description="Per-session buffer for queued MCP messages",
    )

    # Custody backend
    privy_api_url: str = Field(
        default="https://api.privy.io",
        description="Base URL of the Privy wallet API",
    )
    custody_timeout: float = Field(
        default=30.0,
        description="Custody backend request timeout in seconds (no retries)",
    )

    # Server identity
    server_name: str = Field(
        default="solana-agent",
        description="Name advertised to MCP clients",
    )
    server_version: str = Field(
        default="0.0.1",
        description="Version advertised to MCP clients",
    )

    # Opaque keys for the action catalog
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key passed through to actions",
    )

    # Observability
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Enable JSON log format",
    )
    otel_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    otel_endpoint: str | None = Field(
        default=None,
        description="OTLP collector endpoint",
    )
    otel_service_name: str = Field(
        default="solana-agent-mcp",
        description="Service name for traces",
    )

    def resolve_transport(self) -> TransportMode:
        """Decide the transport mode once, at startup.

        An explicit MCP_TRANSPORT wins. Otherwise the presence of PORT
        selects SSE, and its absence selects stdio.
        """
        if self.transport is not None:
            return self.transport
        return TransportMode.SSE if self.port is not None else TransportMode.STDIO

    def require(self, mode: TransportMode) -> None:
        """Check that every variable the given mode needs is present.

        Raises:
            MissingEnvironmentError: Listing the missing variable names.
        """
        required = {"RPC_URL": self.rpc_url}
        if mode is TransportMode.STDIO:
            required = {"SOLANA_PRIVATE_KEY": self.solana_private_key, **required}

        missing = [name for name, value in required.items() if not value]
        if missing:
            raise MissingEnvironmentError(missing)

    def action_config(self) -> dict[str, str]:
        """Opaque third-party keys handed to the action catalog."""
        return {"OPENAI_API_KEY": self.openai_api_key or ""}
