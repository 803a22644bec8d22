"""
HTTP server for SSE mode.

Exposes the MCP agent to many clients at once, each signing through its
own Privy custody wallet.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from .actions import CORE_BUNDLE, ActionBundle, compose_actions
from .config import Settings
from .observability import instrument_fastapi
from .rpc import SolanaRpcClient
from .transport import ConnectionHandler
from .transport.handler import WalletFactory
from .wallets import create_wallet

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000


class McpHttpServer:
    """FastAPI application serving ``/sse`` and ``/messages``."""

    def __init__(
        self,
        settings: Settings,
        bundles: Sequence[ActionBundle] = (CORE_BUNDLE,),
        wallet_factory: WalletFactory = create_wallet,
        rpc: SolanaRpcClient | None = None,
    ):
        self.settings = settings
        self.actions = compose_actions(bundles)
        self.rpc = rpc or SolanaRpcClient(
            settings.rpc_url or "", timeout_s=settings.rpc_timeout
        )
        self.handler = ConnectionHandler(
            settings, self.actions, self.rpc, wallet_factory=wallet_factory
        )

        self.app = FastAPI(
            title=settings.server_name,
            version=settings.server_version,
            lifespan=self._lifespan,
        )
        self._setup_routes()
        instrument_fastapi(self.app)

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            f"{self.settings.server_name} ready with {len(self.actions)} actions"
        )
        yield
        await self.handler.shutdown()
        await self.rpc.close()

    def _setup_routes(self) -> None:
        """Setup SSE, message and health endpoints."""

        @self.app.get("/sse")
        async def sse(request: Request) -> Response:
            return await self.handler.handle_sse(request)

        @self.app.post("/messages")
        async def messages(request: Request) -> Response:
            return await self.handler.handle_post_message(request)

        @self.app.get("/health")
        async def health() -> dict:
            return {"status": "healthy", "sessions": len(self.handler.registry)}

    def run(self) -> None:
        """Run the HTTP server."""
        port = self.settings.port or DEFAULT_PORT
        logger.info(f"Starting SSE MCP server on {self.settings.host}:{port}")
        uvicorn.run(self.app, host=self.settings.host, port=port, log_config=None)
