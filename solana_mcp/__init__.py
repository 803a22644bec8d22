"""Solana agent MCP server with per-connection custody wallets."""

from .actions import CORE_BUNDLE, Action, ActionBundle, action, compose_actions
from .agent import SolanaAgent
from .config import Settings, TransportMode
from .core import (
    ActionConflictError,
    ConfigurationError,
    CredentialBundle,
    Network,
    NoWalletError,
    RpcError,
    SessionNotFoundError,
    SigningFailure,
    SolanaMcpError,
    ValidationError,
)
from .server import McpHttpServer
from .wallets import BaseWallet, KeypairWallet, PrivyWallet, WalletKind, create_wallet

__all__ = [
    # Server
    "McpHttpServer",
    "SolanaAgent",
    # Configuration
    "Settings",
    "TransportMode",
    # Actions
    "Action",
    "ActionBundle",
    "CORE_BUNDLE",
    "action",
    "compose_actions",
    # Wallets
    "BaseWallet",
    "KeypairWallet",
    "PrivyWallet",
    "WalletKind",
    "create_wallet",
    # Types
    "CredentialBundle",
    "Network",
    # Exceptions
    "ActionConflictError",
    "ConfigurationError",
    "NoWalletError",
    "RpcError",
    "SessionNotFoundError",
    "SigningFailure",
    "SolanaMcpError",
    "ValidationError",
]
