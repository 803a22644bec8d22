"""Server-sent-events transport for one MCP session.

A transport is a pair of in-memory streams between the HTTP layer and the
session's MCP server:

    POST /messages --deliver()--> read_stream  --> Server.run()
    GET /sse       <--events()--- write_stream <-- Server.run()
"""

from collections.abc import AsyncIterator

import anyio
import mcp.types as types
from mcp.shared.message import SessionMessage

from ..core.exceptions import SessionNotFoundError


def format_sse_event(event: str, data: str) -> str:
    """
    Format one SSE message.

    ``data`` must be a single line (JSON-RPC messages serialize to one).
    """
    return f"event: {event}\ndata: {data}\n\n"


class SseTransport:
    """Transport handle owned by one SSE connection."""

    def __init__(self, session_id: str, endpoint: str = "/messages", buffer_size: int = 32):
        self.session_id = session_id
        self.endpoint = endpoint
        self._inbound, self.read_stream = anyio.create_memory_object_stream[
            SessionMessage | Exception
        ](buffer_size)
        self.write_stream, self._outbound = anyio.create_memory_object_stream[
            SessionMessage
        ](buffer_size)
        self._closed = False

    @property
    def endpoint_url(self) -> str:
        """Where the client posts messages for this session."""
        return f"{self.endpoint}?sessionId={self.session_id}"

    @property
    def closed(self) -> bool:
        return self._closed

    async def deliver(self, message: types.JSONRPCMessage) -> None:
        """Hand one client message to the session's MCP server.

        Raises:
            SessionNotFoundError: If the transport was closed meanwhile.
        """
        if self._closed:
            raise SessionNotFoundError(self.session_id)
        try:
            await self._inbound.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise SessionNotFoundError(self.session_id) from e

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames: the endpoint announcement, then every server message."""
        yield format_sse_event("endpoint", self.endpoint_url)
        while True:
            try:
                outgoing = await self._outbound.receive()
            except (anyio.EndOfStream, anyio.ClosedResourceError):
                return
            yield format_sse_event(
                "message",
                outgoing.message.model_dump_json(by_alias=True, exclude_none=True),
            )

    def close(self) -> None:
        """Stop accepting client messages.

        Synchronous so it can run from a cancelled stream's cleanup.
        """
        self._closed = True
        self._inbound.close()

    def abort(self) -> None:
        """Close every stream end. For a transport whose server never ran."""
        self.close()
        for stream in (self.read_stream, self.write_stream, self._outbound):
            stream.close()

    async def discard_pending(self) -> int:
        """Consume and drop server output until the server closes its side.

        Used after the client is gone: in-flight calls finish, but their
        results go nowhere.

        Returns:
            Number of discarded messages.
        """
        discarded = 0
        async with self._outbound:
            async for _ in self._outbound:
                discarded += 1
        return discarded
