"""Shared pytest fixtures for the test suite.

Provides keys, credential headers, settings, transactions and mock HTTP
backends for testing wallets, sessions and the SSE transport.
"""

import base64
import json
from collections.abc import Callable

import base58
import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from nacl.signing import SigningKey

from solana_mcp.config import Settings
from solana_mcp.rpc import SolanaRpcClient
from solana_mcp.wallets.base import BaseWallet, WalletKind


@pytest.fixture
def signing_key() -> SigningKey:
    """Fresh ed25519 key."""
    return SigningKey.generate()


@pytest.fixture
def wallet_address(signing_key: SigningKey) -> str:
    """Base58 address of ``signing_key``."""
    return base58.b58encode(bytes(signing_key.verify_key)).decode("ascii")


@pytest.fixture
def secret_key(signing_key: SigningKey) -> str:
    """Base58 64-byte secret key (seed followed by public key)."""
    raw = bytes(signing_key) + bytes(signing_key.verify_key)
    return base58.b58encode(raw).decode("ascii")


@pytest.fixture
def authorization_key() -> str:
    """P-256 key in the base64 PKCS#8 form Privy hands out."""
    key = ec.generate_private_key(ec.SECP256R1())
    der = key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return "wallet-auth:" + base64.b64encode(der).decode("ascii")


@pytest.fixture
def valid_headers(wallet_address: str, authorization_key: str) -> dict[str, str]:
    """A complete, valid set of custody headers."""
    return {
        "X-Privy-Wallet-Id": "wallet-123",
        "X-Privy-App-Id": "app-456",
        "X-Privy-App-Secret": "secret-789",
        "X-Privy-Authorization-Private-Key": authorization_key,
        "X-Wallet-Address": wallet_address,
        "X-Network": "devnet",
    }


@pytest.fixture
def settings(secret_key: str) -> Settings:
    """Settings that ignore the local .env file."""
    return Settings(
        _env_file=None,
        rpc_url="http://rpc.test",
        solana_private_key=secret_key,
        privy_api_url="https://privy.test",
        custody_timeout=5.0,
        rpc_timeout=5.0,
    )


@pytest.fixture
def make_transaction() -> Callable[..., bytes]:
    """Builder for unsigned legacy or v0 transactions.

    Usage:
        raw = make_transaction([payer_key], extra_keys=1)
    """

    def build(
        signers: list[bytes], extra_keys: int = 1, versioned: bool = False
    ) -> bytes:
        keys = list(signers) + [bytes([0xAA + i]) * 32 for i in range(extra_keys)]
        message = bytes([len(signers), 0, extra_keys])
        message += bytes([len(keys)]) + b"".join(keys)
        message += b"\x11" * 32  # recent blockhash
        message += b"\x00"  # no instructions
        if versioned:
            message = b"\x80" + message + b"\x00"  # no address table lookups
        return bytes([len(signers)]) + b"\x00" * 64 * len(signers) + message

    return build


def json_rpc_transport(
    results: dict[str, object], calls: list[dict] | None = None
) -> httpx.MockTransport:
    """Mock Solana RPC node answering each method from ``results``.

    A value that is an Exception instance is returned as a JSON-RPC error.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append(body)
        result = results.get(body["method"])
        if isinstance(result, Exception):
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32000, "message": str(result)}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return httpx.MockTransport(handler)


@pytest.fixture
def rpc_factory() -> Callable[..., SolanaRpcClient]:
    """Build an RPC client backed by a mock node."""

    def build(results: dict[str, object], calls: list[dict] | None = None) -> SolanaRpcClient:
        return SolanaRpcClient(
            "http://rpc.test", timeout_s=5.0, transport=json_rpc_transport(results, calls)
        )

    return build


class FakeWallet(BaseWallet):
    """In-memory wallet recording what it was asked to do."""

    kind = WalletKind.PRIVY

    def __init__(self, address: str, fail_with: Exception | None = None):
        self._address = address
        self.fail_with = fail_with
        self.signed: list[bytes] = []
        self.messages: list[bytes] = []
        self.closed = 0

    @property
    def public_key(self) -> str:
        return self._address

    async def sign_transaction(self, transaction: bytes) -> bytes:
        if self.fail_with:
            raise self.fail_with
        self.signed.append(transaction)
        return b"signed:" + transaction

    async def send_transaction(self, transaction: bytes) -> str:
        await self.sign_transaction(transaction)
        return "sig-" + str(len(self.signed))

    async def sign_message(self, message: bytes) -> bytes:
        if self.fail_with:
            raise self.fail_with
        self.messages.append(message)
        return b"\x01" * 64

    async def aclose(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_wallet(wallet_address: str) -> FakeWallet:
    return FakeWallet(wallet_address)


@pytest.fixture
def fake_wallet_factory() -> Callable[..., BaseWallet]:
    """Wallet factory producing FakeWallets; built wallets are kept on ``.built``."""
    built: list[FakeWallet] = []

    def factory(kind, settings, *, credentials=None, rpc=None) -> BaseWallet:
        wallet = FakeWallet(credentials.wallet_address)
        built.append(wallet)
        return wallet

    factory.built = built  # type: ignore[attr-defined]
    return factory


