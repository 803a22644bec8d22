"""Single-session stdio mode.

One implicit session for the life of the process: the wallet is built once
from SOLANA_PRIVATE_KEY and MCP messages flow over stdin/stdout.
"""

import logging
from collections.abc import Mapping

from mcp.server.stdio import stdio_server

from ..actions import Action
from ..agent import SolanaAgent
from ..config import Settings
from ..mcp_server import create_mcp_server
from ..rpc import SolanaRpcClient
from ..wallets import WalletKind, create_wallet

logger = logging.getLogger(__name__)


async def run_stdio(settings: Settings, actions: Mapping[str, Action]) -> None:
    """Serve MCP over stdin/stdout until the client closes the stream."""
    rpc = SolanaRpcClient(settings.rpc_url or "", timeout_s=settings.rpc_timeout)
    try:
        wallet = create_wallet(WalletKind.KEYPAIR, settings, rpc=rpc)
        agent = SolanaAgent(wallet=wallet, rpc=rpc, config=settings.action_config())
        server = create_mcp_server(
            actions,
            agent,
            name=settings.server_name,
            version=settings.server_version,
        )

        logger.info(
            f"Starting stdio MCP server for {wallet.public_key} with {len(actions)} actions"
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
        logger.info("stdio MCP server stopped")
    finally:
        await rpc.close()
