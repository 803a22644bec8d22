"""Tests for solana_mcp/config.py.

Tests cover:
- Defaults
- Environment variable loading
- Transport mode resolution
- Required variables per mode
"""

import pytest

from solana_mcp.config import Settings, TransportMode
from solana_mcp.core.exceptions import MissingEnvironmentError

ENV_VARS = (
    "SOLANA_PRIVATE_KEY",
    "RPC_URL",
    "PORT",
    "HOST",
    "MCP_TRANSPORT",
    "TRANSPORT",
    "OPENAI_API_KEY",
    "PRIVY_API_URL",
    "CUSTODY_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def make_settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestDefaults:
    """Test default values."""

    def test_defaults(self, clean_env) -> None:
        settings = make_settings()
        assert settings.rpc_url is None
        assert settings.port is None
        assert settings.host == "0.0.0.0"
        assert settings.privy_api_url == "https://api.privy.io"
        assert settings.custody_timeout == 30.0
        assert settings.rpc_timeout == 30.0
        assert settings.log_level == "INFO"
        assert settings.otel_enabled is False


class TestEnvironment:
    """Test loading from environment variables."""

    def test_reads_environment(self, clean_env) -> None:
        clean_env.setenv("RPC_URL", "https://api.devnet.solana.com")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("CUSTODY_TIMEOUT", "12.5")
        clean_env.setenv("OPENAI_API_KEY", "sk-test")

        settings = make_settings()

        assert settings.rpc_url == "https://api.devnet.solana.com"
        assert settings.port == 8080
        assert settings.custody_timeout == 12.5
        assert settings.action_config() == {"OPENAI_API_KEY": "sk-test"}

    def test_action_config_without_key(self, clean_env) -> None:
        assert make_settings().action_config() == {"OPENAI_API_KEY": ""}

    def test_mcp_transport_variable(self, clean_env) -> None:
        clean_env.setenv("MCP_TRANSPORT", "sse")
        assert make_settings().transport is TransportMode.SSE


class TestResolveTransport:
    """Test transport mode selection."""

    def test_stdio_without_port(self, clean_env) -> None:
        assert make_settings().resolve_transport() is TransportMode.STDIO

    def test_sse_with_port(self, clean_env) -> None:
        assert make_settings(port=3000).resolve_transport() is TransportMode.SSE

    def test_explicit_mode_wins(self, clean_env) -> None:
        settings = make_settings(port=3000, transport=TransportMode.STDIO)
        assert settings.resolve_transport() is TransportMode.STDIO


class TestRequire:
    """Test required-variable checks."""

    def test_stdio_requires_key_and_rpc(self, clean_env) -> None:
        with pytest.raises(MissingEnvironmentError) as exc_info:
            make_settings().require(TransportMode.STDIO)

        assert exc_info.value.names == ["SOLANA_PRIVATE_KEY", "RPC_URL"]

    def test_stdio_missing_rpc_only(self, clean_env) -> None:
        with pytest.raises(MissingEnvironmentError) as exc_info:
            make_settings(solana_private_key="abc").require(TransportMode.STDIO)

        assert exc_info.value.message == "Missing required environment variables: RPC_URL"

    def test_sse_does_not_need_private_key(self, clean_env) -> None:
        make_settings(rpc_url="http://rpc.test").require(TransportMode.SSE)

    def test_sse_requires_rpc(self, clean_env) -> None:
        with pytest.raises(MissingEnvironmentError) as exc_info:
            make_settings(port=3000).require(TransportMode.SSE)

        assert exc_info.value.names == ["RPC_URL"]
