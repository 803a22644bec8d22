"""Local keypair wallet.

Used by the single-session stdio mode, where the process owns a secret key
from SOLANA_PRIVATE_KEY instead of delegating to a custody service.
"""

import logging

import base58
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

from ..core.exceptions import ConfigurationError, RpcError, SigningFailure
from ..rpc import SolanaRpcClient
from .base import BaseWallet, WalletKind
from .transaction import TransactionFormatError, parse_transaction

logger = logging.getLogger(__name__)

SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64


def load_signing_key(secret_key: str) -> SigningKey:
    """Decode a base58 secret key into a signing key.

    Accepts the 64-byte form (seed followed by public key) and a bare
    32-byte seed.

    Raises:
        ConfigurationError: If the key cannot be decoded.
    """
    try:
        raw = base58.b58decode(secret_key.strip())
    except ValueError as e:
        raise ConfigurationError(f"SOLANA_PRIVATE_KEY is not valid base58: {e}") from e

    if len(raw) not in (SEED_LENGTH, SECRET_KEY_LENGTH):
        raise ConfigurationError(
            f"SOLANA_PRIVATE_KEY must decode to {SEED_LENGTH} or {SECRET_KEY_LENGTH} bytes, got {len(raw)}"
        )

    signing_key = SigningKey(raw[:SEED_LENGTH])
    if len(raw) == SECRET_KEY_LENGTH and bytes(signing_key.verify_key) != raw[SEED_LENGTH:]:
        raise ConfigurationError("SOLANA_PRIVATE_KEY public half does not match its seed")
    return signing_key


class KeypairWallet(BaseWallet):
    """Wallet that signs with a locally held ed25519 key."""

    kind = WalletKind.KEYPAIR

    def __init__(self, signing_key: SigningKey, rpc: SolanaRpcClient):
        self._signing_key = signing_key
        self._public_key_bytes = bytes(signing_key.verify_key)
        self._public_key = base58.b58encode(self._public_key_bytes).decode("ascii")
        self._rpc = rpc

    @classmethod
    def from_secret_key(cls, secret_key: str, rpc: SolanaRpcClient) -> "KeypairWallet":
        return cls(load_signing_key(secret_key), rpc)

    @property
    def public_key(self) -> str:
        return self._public_key

    async def sign_transaction(self, transaction: bytes) -> bytes:
        try:
            parsed = parse_transaction(transaction)
            signers = parsed.signer_keys()
        except TransactionFormatError as e:
            raise SigningFailure("signTransaction", "malformed transaction", e) from e

        if self._public_key_bytes not in signers:
            raise SigningFailure(
                "signTransaction", f"{self._public_key} is not a required signer"
            )

        index = signers.index(self._public_key_bytes)
        signature = self._signing_key.sign(parsed.message).signature
        return parsed.with_signature(index, signature)

    async def send_transaction(self, transaction: bytes) -> str:
        signed = await self.sign_transaction(transaction)
        try:
            return await self._rpc.send_transaction(signed)
        except RpcError as e:
            raise SigningFailure("sendTransaction", e.message, e) from e

    async def sign_message(self, message: bytes) -> bytes:
        try:
            return self._signing_key.sign(bytes(message)).signature
        except CryptoError as e:
            raise SigningFailure("signMessage", "local signing failed", e) from e
