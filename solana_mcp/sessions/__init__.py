"""Session lifecycle and registry."""

from .registry import Session, SessionRegistry, SessionState

__all__ = [
    "Session",
    "SessionRegistry",
    "SessionState",
]
