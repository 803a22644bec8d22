"""Signing wallets: interface, local keypair and Privy custody backends."""

from .base import BaseWallet, WalletKind
from .factory import create_wallet
from .keypair import KeypairWallet
from .privy import PrivyClient, PrivyWallet
from .signatures import normalize_signature

__all__ = [
    "BaseWallet",
    "WalletKind",
    "create_wallet",
    "KeypairWallet",
    "PrivyClient",
    "PrivyWallet",
    "normalize_signature",
]
