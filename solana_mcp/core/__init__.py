"""Core types and exceptions."""

from .exceptions import (
    ActionConflictError,
    ConfigurationError,
    DuplicateSessionError,
    MissingEnvironmentError,
    NoWalletError,
    RpcError,
    SessionNotFoundError,
    SigningFailure,
    SolanaMcpError,
    ValidationError,
)
from .types import CHAIN_IDS, CredentialBundle, Network, SendResult, chain_id_for

__all__ = [
    # Types
    "CHAIN_IDS",
    "CredentialBundle",
    "Network",
    "SendResult",
    "chain_id_for",
    # Exceptions
    "ActionConflictError",
    "ConfigurationError",
    "DuplicateSessionError",
    "MissingEnvironmentError",
    "NoWalletError",
    "RpcError",
    "SessionNotFoundError",
    "SigningFailure",
    "SolanaMcpError",
    "ValidationError",
]
