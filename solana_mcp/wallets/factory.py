"""Wallet construction.

The backend is chosen by an explicit WalletKind, never by inspecting what
the caller happens to pass in.
"""

from ..config import Settings
from ..core.exceptions import ConfigurationError
from ..core.types import CredentialBundle
from ..rpc import SolanaRpcClient
from .base import BaseWallet, WalletKind
from .keypair import KeypairWallet
from .privy import PrivyWallet


def create_wallet(
    kind: WalletKind,
    settings: Settings,
    *,
    credentials: CredentialBundle | None = None,
    rpc: SolanaRpcClient | None = None,
) -> BaseWallet:
    """Create a wallet of the requested kind.

    Args:
        kind: Which backend to build.
        settings: Process settings (custody URL and timeout, secret key).
        credentials: Custody credentials; required for PRIVY.
        rpc: Shared RPC client; required for KEYPAIR.

    Returns:
        The wallet.

    Raises:
        ConfigurationError: If the inputs for the chosen kind are missing.
    """
    if kind is WalletKind.PRIVY:
        if credentials is None:
            raise ConfigurationError("Privy wallet requires a credential bundle")
        return PrivyWallet(
            credentials,
            base_url=settings.privy_api_url,
            timeout_s=settings.custody_timeout,
        )

    if kind is WalletKind.KEYPAIR:
        if not settings.solana_private_key:
            raise ConfigurationError("Keypair wallet requires SOLANA_PRIVATE_KEY")
        if rpc is None:
            raise ConfigurationError("Keypair wallet requires an RPC client")
        return KeypairWallet.from_secret_key(settings.solana_private_key, rpc)

    raise ConfigurationError(f"Unknown wallet kind: {kind}")
