"""Session tracking for SSE connections.

The registry maps session ids to transport handles and is the only mutable
structure shared between connections. A lock guards every access, so a
concurrent lookup sees either no entry or a fully inserted one.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from ..core.exceptions import DuplicateSessionError, SessionNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionState(str, Enum):
    """Lifecycle of one connection."""

    CREATED = "created"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class Session(Generic[T]):
    """Server-side state for one streaming connection."""

    session_id: str
    transport: T
    state: SessionState = SessionState.CREATED
    created_at: float = field(default_factory=time.time)

    def activate(self) -> None:
        if self.state is not SessionState.CREATED:
            raise RuntimeError(f"Cannot activate session in state {self.state.value}")
        self.state = SessionState.ACTIVE

    def close(self) -> bool:
        """Move to CLOSED.

        Returns:
            True the first time, False if the session was already closed.
        """
        if self.state is SessionState.CLOSED:
            return False
        self.state = SessionState.CLOSED
        return True

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE


class SessionRegistry(Generic[T]):
    """Thread-safe mapping from session id to transport handle."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._transports: dict[str, T] = {}

    def add(self, session_id: str, transport: T) -> None:
        """Register a transport.

        Raises:
            DuplicateSessionError: If the id is already registered.
        """
        with self._lock:
            if session_id in self._transports:
                raise DuplicateSessionError(session_id)
            self._transports[session_id] = transport
        logger.debug(f"Registered session: {session_id}")

    def remove(self, session_id: str) -> bool:
        """Deregister a transport. Unknown ids are ignored.

        Returns:
            True if an entry was removed.
        """
        with self._lock:
            removed = self._transports.pop(session_id, None) is not None
        if removed:
            logger.debug(f"Removed session: {session_id}")
        return removed

    def lookup(self, session_id: str | None) -> T:
        """Return the transport for a session id.

        Raises:
            SessionNotFoundError: If the id is not registered.
        """
        with self._lock:
            transport = self._transports.get(session_id) if session_id else None
        if transport is None:
            raise SessionNotFoundError(session_id)
        return transport

    def session_ids(self) -> list[str]:
        """Snapshot of registered ids."""
        with self._lock:
            return list(self._transports)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._transports

    def __len__(self) -> int:
        with self._lock:
            return len(self._transports)
