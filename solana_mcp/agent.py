"""The agent handed to actions: a wallet, an RPC client and opaque config."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from .rpc import SolanaRpcClient
from .wallets import BaseWallet


@dataclass
class SolanaAgent:
    """Everything an action may touch for one session.

    Attributes:
        wallet: Signing wallet owned by this session.
        rpc: Process-wide Solana RPC client.
        config: Third-party API keys, passed through untouched.
    """

    wallet: BaseWallet
    rpc: SolanaRpcClient
    config: Mapping[str, str] = field(default_factory=dict)

    @property
    def wallet_address(self) -> str:
        return self.wallet.public_key
