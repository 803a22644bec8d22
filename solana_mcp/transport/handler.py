"""SSE connection handling.

Ties credential extraction, wallet construction and the session registry
together for every ``GET /sse`` connection, and routes ``POST /messages``
bodies to the right session.

Per connection:
    CREATED  -> credentials valid, wallet and server built, registered -> ACTIVE
    CREATED  -> credentials, wallet or server setup rejected          -> CLOSED (HTTP 4xx/5xx)
    ACTIVE   -> stream ends for any reason                            -> CLOSED (cleanup once)
"""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator, Callable, Mapping

import mcp.types as types
from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from mcp.server.lowlevel import Server
from pydantic import ValidationError as PydanticValidationError
from starlette.background import BackgroundTask

from ..actions import Action
from ..agent import SolanaAgent
from ..config import Settings
from ..core.exceptions import SessionNotFoundError, SolanaMcpError, ValidationError
from ..mcp_server import create_mcp_server
from ..observability import SessionLoggerAdapter
from ..rpc import SolanaRpcClient
from ..security import extract_credentials
from ..sessions import Session, SessionRegistry
from ..wallets import BaseWallet, WalletKind, create_wallet
from .sse import SseTransport

logger = logging.getLogger(__name__)

WalletFactory = Callable[..., BaseWallet]


class ConnectionHandler:
    """Owns the session registry and the lifecycle of every SSE connection."""

    def __init__(
        self,
        settings: Settings,
        actions: Mapping[str, Action],
        rpc: SolanaRpcClient,
        registry: SessionRegistry[SseTransport] | None = None,
        wallet_factory: WalletFactory = create_wallet,
        endpoint: str = "/messages",
    ):
        self.settings = settings
        self.actions = actions
        self.rpc = rpc
        self.registry: SessionRegistry[SseTransport] = registry or SessionRegistry()
        self.endpoint = endpoint
        self._wallet_factory = wallet_factory
        self._sessions: dict[str, Session[SseTransport]] = {}
        self._server_tasks: set[asyncio.Task] = set()
        self._cleanup_tasks: set[asyncio.Task] = set()

    async def connect(self, headers: Mapping[str, str]) -> Session[SseTransport]:
        """Validate a new connection and bring its session up.

        Raises:
            ValidationError: Missing or invalid credential header.
            NoWalletError: No custody wallet id.
        """
        credentials = extract_credentials(headers)
        wallet = self._wallet_factory(
            WalletKind.PRIVY, self.settings, credentials=credentials
        )

        session_id = uuid.uuid4().hex
        transport = SseTransport(session_id, self.endpoint, self.settings.sse_buffer_size)
        session: Session[SseTransport] = Session(session_id=session_id, transport=transport)
        # Nothing is registered until the session's server exists.
        try:
            agent = SolanaAgent(
                wallet=wallet, rpc=self.rpc, config=self.settings.action_config()
            )
            server = create_mcp_server(
                self.actions,
                agent,
                name=self.settings.server_name,
                version=self.settings.server_version,
            )
            self.registry.add(session_id, transport)
        except BaseException:
            session.close()
            transport.abort()
            await wallet.aclose()
            raise
        session.activate()
        self._sessions[session_id] = session

        task = asyncio.create_task(self._serve(session, server, wallet))
        self._server_tasks.add(task)
        task.add_done_callback(self._server_tasks.discard)

        SessionLoggerAdapter(logger, session_id).info(
            f"SSE session opened for wallet {wallet.public_key} ({credentials.network.value})"
        )
        return session

    async def _serve(
        self, session: Session[SseTransport], server: Server, wallet: BaseWallet
    ) -> None:
        log = SessionLoggerAdapter(logger, session.session_id)
        transport = session.transport
        try:
            await server.run(
                transport.read_stream,
                transport.write_stream,
                server.create_initialization_options(),
            )
        except Exception as e:
            if session.is_active:
                log.exception("MCP server stopped unexpectedly")
            else:
                log.debug(f"MCP server stopped after disconnect: {e}")
        finally:
            transport.write_stream.close()
            await wallet.aclose()

    def disconnect(self, session: Session[SseTransport]) -> bool:
        """Tear a session down. Only the first call does anything.

        Synchronous: it runs from the stream's cleanup, which may already be
        cancelled.

        Returns:
            True if this call performed the cleanup.
        """
        if not session.close():
            return False

        self._sessions.pop(session.session_id, None)
        self.registry.remove(session.session_id)
        session.transport.close()

        task = asyncio.get_running_loop().create_task(self._discard_late_results(session))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)

        SessionLoggerAdapter(logger, session.session_id).info("SSE session closed")
        return True

    async def _discard_late_results(self, session: Session[SseTransport]) -> None:
        discarded = await session.transport.discard_pending()
        if discarded:
            SessionLoggerAdapter(logger, session.session_id).info(
                f"Discarded {discarded} message(s) produced after disconnect"
            )

    async def _event_stream(self, session: Session[SseTransport]) -> AsyncIterator[str]:
        try:
            async for frame in session.transport.events():
                yield frame
        finally:
            self.disconnect(session)

    async def _finish(self, session: Session[SseTransport]) -> None:
        # Covers streams that were cancelled before their first frame.
        self.disconnect(session)

    async def handle_sse(self, request: Request) -> Response:
        """``GET /sse``: open an event stream for a new session."""
        try:
            session = await self.connect(request.headers)
        except ValidationError as e:
            logger.warning(f"Rejected SSE connection: {e.message}")
            return JSONResponse({"error": e.message}, status_code=400)
        except Exception as e:
            logger.exception("Failed to set up SSE connection")
            message = e.message if isinstance(e, SolanaMcpError) else str(e)
            return JSONResponse({"error": message}, status_code=500)

        return StreamingResponse(
            self._event_stream(session),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
            background=BackgroundTask(self._finish, session),
        )

    async def handle_post_message(self, request: Request) -> Response:
        """``POST /messages?sessionId=<id>``: deliver one client message."""
        session_id = request.query_params.get("sessionId")
        try:
            transport = self.registry.lookup(session_id)
        except SessionNotFoundError as e:
            logger.warning(f"Message for unknown session: {session_id}")
            return PlainTextResponse(e.message, status_code=400)

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except PydanticValidationError as e:
            SessionLoggerAdapter(logger, transport.session_id).warning(
                f"Could not parse message: {e.error_count()} error(s)"
            )
            return PlainTextResponse("Could not parse message", status_code=400)

        try:
            await transport.deliver(message)
        except SessionNotFoundError as e:
            return PlainTextResponse(e.message, status_code=400)

        return PlainTextResponse("Accepted", status_code=202)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Close every session and wait for its server to stop.

        Servers still busy after ``timeout`` seconds are cancelled.
        """
        for session in list(self._sessions.values()):
            self.disconnect(session)

        if self._server_tasks:
            _, pending = await asyncio.wait(set(self._server_tasks), timeout=timeout)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        await asyncio.gather(*self._cleanup_tasks, return_exceptions=True)
