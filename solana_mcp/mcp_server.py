"""MCP server bound to one agent.

Each session gets its own low-level mcp Server whose tools are the composed
action catalog and whose handlers close over that session's agent.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server

from .actions import Action
from .agent import SolanaAgent
from .core.exceptions import SolanaMcpError

logger = logging.getLogger(__name__)


def create_mcp_server(
    actions: Mapping[str, Action],
    agent: SolanaAgent,
    name: str = "solana-agent",
    version: str = "0.0.1",
) -> Server:
    """Create an MCP server exposing actions as tools.

    Args:
        actions: Composed action catalog, keyed by name.
        agent: Agent the handlers run against.
        name: Server name advertised during initialization.
        version: Server version advertised during initialization.

    Returns:
        A low-level mcp Server ready for ``run()``.
    """
    server = Server(name, version=version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=item.name,
                description=item.description,
                inputSchema=item.input_schema(),
            )
            for item in actions.values()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        item = actions.get(name)
        if item is None:
            raise ValueError(f"Unknown action: {name}")

        logger.debug(f"Calling {name} for {agent.wallet_address}")
        try:
            result = await item(agent, arguments or {})
        except SolanaMcpError as e:
            logger.warning(f"Action {name} failed: {e}")
            raise

        return [types.TextContent(type="text", text=json.dumps(result, default=str))]

    return server
