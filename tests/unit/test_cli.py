"""Tests for the CLI in solana_mcp/cli.py.

Tests cover:
- serve: startup validation, mode selection, option overrides
- actions: catalog listing
"""

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from solana_mcp.actions import CORE_BUNDLE, ActionBundle
from solana_mcp.cli import app
from solana_mcp.config import TransportMode

runner = CliRunner()

BASE_ENV = {
    "SOLANA_PRIVATE_KEY": None,
    "RPC_URL": None,
    "PORT": None,
    "MCP_TRANSPORT": None,
    "TRANSPORT": None,
    "OTEL_ENABLED": None,
}


def env(**values: str) -> dict[str, str | None]:
    return {**BASE_ENV, **values}


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep the CLI from replacing the root logger's handlers."""
    with patch("solana_mcp.cli.setup_logging"):
        yield


class TestServeValidation:
    """Test startup failures."""

    def test_missing_rpc_url(self) -> None:
        result = runner.invoke(app, ["serve"], env=env(SOLANA_PRIVATE_KEY="key"))

        assert result.exit_code == 1
        assert "Failed to start MCP server" in result.output
        assert "Missing required environment variables: RPC_URL" in result.output

    def test_missing_both_in_stdio_mode(self) -> None:
        result = runner.invoke(app, ["serve"], env=env())

        assert result.exit_code == 1
        assert "SOLANA_PRIVATE_KEY, RPC_URL" in result.output

    def test_sse_mode_does_not_need_private_key(self) -> None:
        with patch("solana_mcp.cli.McpHttpServer") as server_cls:
            result = runner.invoke(app, ["serve"], env=env(PORT="3000", RPC_URL="http://rpc.test"))

        assert result.exit_code == 0
        server_cls.return_value.run.assert_called_once()

    def test_invalid_private_key(self) -> None:
        result = runner.invoke(
            app, ["serve"], env=env(SOLANA_PRIVATE_KEY="0OIl", RPC_URL="http://rpc.test")
        )

        assert result.exit_code == 1
        assert "SOLANA_PRIVATE_KEY" in result.output

    def test_invalid_port(self) -> None:
        result = runner.invoke(app, ["serve"], env=env(PORT="not-a-port"))

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestServeModes:
    """Test transport mode selection."""

    def test_stdio_without_port(self, secret_key) -> None:
        with patch("solana_mcp.cli.run_stdio", new_callable=AsyncMock) as run_stdio:
            result = runner.invoke(
                app, ["serve"], env=env(SOLANA_PRIVATE_KEY=secret_key, RPC_URL="http://rpc.test")
            )

        assert result.exit_code == 0
        run_stdio.assert_awaited_once()
        actions = run_stdio.await_args.args[1]
        assert "SIGN_MESSAGE" in actions

    def test_sse_server_gets_settings(self) -> None:
        with patch("solana_mcp.cli.McpHttpServer") as server_cls:
            runner.invoke(app, ["serve"], env=env(PORT="4000", RPC_URL="http://rpc.test"))

        settings = server_cls.call_args.args[0]
        assert settings.port == 4000
        assert settings.rpc_url == "http://rpc.test"

    def test_transport_option_overrides_port(self, secret_key) -> None:
        with patch("solana_mcp.cli.run_stdio", new_callable=AsyncMock) as run_stdio:
            result = runner.invoke(
                app,
                ["serve", "--transport", "stdio"],
                env=env(PORT="3000", SOLANA_PRIVATE_KEY=secret_key, RPC_URL="http://rpc.test"),
            )

        assert result.exit_code == 0
        assert run_stdio.await_args.args[0].resolve_transport() is TransportMode.STDIO

    def test_port_option_selects_sse(self) -> None:
        with patch("solana_mcp.cli.McpHttpServer") as server_cls:
            result = runner.invoke(
                app, ["serve", "--port", "5050"], env=env(RPC_URL="http://rpc.test")
            )

        assert result.exit_code == 0
        assert server_cls.call_args.args[0].port == 5050

    def test_unexpected_error_exits_nonzero(self) -> None:
        with patch("solana_mcp.cli.McpHttpServer") as server_cls:
            server_cls.return_value.run.side_effect = OSError("address already in use")
            result = runner.invoke(app, ["serve"], env=env(PORT="3000", RPC_URL="http://rpc.test"))

        assert result.exit_code == 1
        assert "address already in use" in result.output


class TestActionsCommand:
    """Test the actions listing."""

    def test_lists_catalog(self) -> None:
        result = runner.invoke(app, ["actions"])

        assert result.exit_code == 0
        for name in ("WALLET_ADDRESS", "BALANCE", "TRANSFER", "TOKEN_BALANCES", "SIGN_MESSAGE"):
            assert name in result.output

    def test_conflicting_bundles_exit_nonzero(self) -> None:
        duplicate = ActionBundle("duplicate", CORE_BUNDLE.actions[:1])

        with patch("solana_mcp.cli.BUNDLES", (CORE_BUNDLE, duplicate)):
            result = runner.invoke(app, ["actions"])

        assert result.exit_code == 1
        assert "Action 'WALLET_ADDRESS' is defined by both 'core' and 'duplicate'" in result.output
