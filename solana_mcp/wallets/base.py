"""Abstract signing wallet.

Defines the capability set every wallet backend implements. Backends are
picked by WalletKind at construction time; callers only see BaseWallet.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum

from ..core.types import SendResult


class WalletKind(str, Enum):
    """Wallet backends."""

    KEYPAIR = "keypair"
    PRIVY = "privy"


class BaseWallet(ABC):
    """Signing capability bound to one Solana public key.

    Transactions are serialized Solana transactions (wire format bytes).
    They are passed through without interpretation beyond what the backend
    needs to sign them.

    Lifecycle:
        1. Build through create_wallet()
        2. Sign / submit as often as needed
        3. Call aclose() when the owning session ends
    """

    kind: WalletKind

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Base58 public key of the wallet."""

    @abstractmethod
    async def sign_transaction(self, transaction: bytes) -> bytes:
        """Sign one transaction and return it in the same wire format.

        Raises:
            SigningFailure: If the backend fails or returns garbage.
        """

    async def sign_all_transactions(
        self, transactions: Sequence[bytes]
    ) -> list[bytes]:
        """Sign transactions one after another, preserving order.

        The first failure aborts the batch; remaining transactions are not
        attempted.
        """
        signed: list[bytes] = []
        for transaction in transactions:
            signed.append(await self.sign_transaction(transaction))
        return signed

    @abstractmethod
    async def send_transaction(self, transaction: bytes) -> str:
        """Sign and submit a transaction, returning its signature string."""

    async def sign_and_send_transaction(self, transaction: bytes) -> SendResult:
        """Sign and submit a transaction, returning a SendResult."""
        return SendResult(signature=await self.send_transaction(transaction))

    @abstractmethod
    async def sign_message(self, message: bytes) -> bytes:
        """Sign arbitrary bytes and return the raw 64-byte signature."""

    async def aclose(self) -> None:
        """Release backend resources. Safe to call more than once."""
