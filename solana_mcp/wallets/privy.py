"""
Privy custody wallet.

Forwards every signing operation to the Privy wallet RPC API. The private
key never leaves Privy; this process only holds the app credentials and an
authorization key used to sign each request.

Requests:
    POST {base_url}/v1/wallets/{wallet_id}/rpc
    Authorization: Basic base64(app_id:app_secret)
    privy-app-id: <app_id>
    privy-authorization-signature: <ECDSA P-256 over the canonical request>
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import httpx
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import load_der_private_key

from ..core.exceptions import NoWalletError, SigningFailure
from ..core.types import CredentialBundle, chain_id_for
from ..observability import traced_operation
from ..security.credentials import NO_WALLET_SENTINEL
from .base import BaseWallet, WalletKind
from .signatures import normalize_signature

logger = logging.getLogger(__name__)

DEFAULT_PRIVY_API_URL = "https://api.privy.io"
AUTHORIZATION_KEY_PREFIX = "wallet-auth:"


def canonical_json(payload: dict[str, Any]) -> bytes:
    """Serialize with sorted keys and no whitespace."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


class PrivyClient:
    """
    Async client for the Privy wallet RPC endpoint.

    One instance per session. Requests are single attempts bounded by
    ``timeout_s``; there is no retry.
    """

    def __init__(
        self,
        app_id: str,
        app_secret: str,
        authorization_key: str,
        base_url: str = DEFAULT_PRIVY_API_URL,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.app_id = app_id
        self._app_secret = app_secret
        self._authorization_key = authorization_key
        self._signing_key: ec.EllipticCurvePrivateKey | None = None
        self.base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_s,
                auth=(self.app_id, self._app_secret),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _load_signing_key(self) -> ec.EllipticCurvePrivateKey:
        if self._signing_key is None:
            encoded = self._authorization_key.removeprefix(AUTHORIZATION_KEY_PREFIX)
            try:
                key = load_der_private_key(base64.b64decode(encoded), password=None)
            except (binascii.Error, ValueError, TypeError, UnsupportedAlgorithm) as e:
                raise SigningFailure(
                    "authorize", "authorization key is not a base64 PKCS#8 key", e
                ) from e
            if not isinstance(key, ec.EllipticCurvePrivateKey):
                raise SigningFailure("authorize", "authorization key must be an EC key")
            self._signing_key = key
        return self._signing_key

    def authorization_signature(self, url: str, body: dict[str, Any]) -> str:
        """Sign a request the way Privy verifies it.

        Args:
            url: Full request URL.
            body: JSON request body.

        Returns:
            Base64 DER-encoded ECDSA signature.
        """
        payload = {
            "version": 1,
            "method": "POST",
            "url": url,
            "body": body,
            "headers": {"privy-app-id": self.app_id},
        }
        signature = self._load_signing_key().sign(
            canonical_json(payload), ec.ECDSA(hashes.SHA256())
        )
        return base64.b64encode(signature).decode("ascii")

    async def rpc(self, wallet_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Call the wallet RPC endpoint and return the ``data`` member.

        Raises:
            SigningFailure: On transport errors, non-2xx responses or a
                response without a data object.
        """
        method = body.get("method", "rpc")
        url = f"{self.base_url}/v1/wallets/{wallet_id}/rpc"
        headers = {
            "privy-app-id": self.app_id,
            "privy-authorization-signature": self.authorization_signature(url, body),
        }
        client = await self._get_client()

        with traced_operation(f"custody.{method}", {"wallet.id": wallet_id}):
            try:
                response = await client.post(url, json=body, headers=headers)
                response.raise_for_status()
                result = response.json()
            except httpx.TimeoutException as e:
                raise SigningFailure(method, f"custody backend timed out after {self._timeout_s}s") from e
            except httpx.HTTPStatusError as e:
                raise SigningFailure(
                    method, f"custody backend returned HTTP {e.response.status_code}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise SigningFailure(method, "custody backend request failed", e) from e

        data = result.get("data") if isinstance(result, dict) else None
        if not isinstance(data, dict):
            raise SigningFailure(method, "custody backend response has no data")
        return data

    async def sign_transaction(self, wallet_id: str, transaction: str) -> dict[str, Any]:
        return await self.rpc(
            wallet_id,
            {
                "method": "signTransaction",
                "params": {"transaction": transaction, "encoding": "base64"},
            },
        )

    async def sign_and_send_transaction(
        self, wallet_id: str, caip2: str, transaction: str
    ) -> dict[str, Any]:
        return await self.rpc(
            wallet_id,
            {
                "method": "signAndSendTransaction",
                "caip2": caip2,
                "params": {"transaction": transaction, "encoding": "base64"},
            },
        )

    async def sign_message(self, wallet_id: str, message: str) -> dict[str, Any]:
        return await self.rpc(
            wallet_id,
            {
                "method": "signMessage",
                "params": {"message": message, "encoding": "base64"},
            },
        )


class PrivyWallet(BaseWallet):
    """Wallet whose keys live in Privy custody.

    The public key and CAIP-2 chain id are fixed at construction.
    """

    kind = WalletKind.PRIVY

    def __init__(
        self,
        credentials: CredentialBundle,
        client: PrivyClient | None = None,
        base_url: str = DEFAULT_PRIVY_API_URL,
        timeout_s: float = 30.0,
    ):
        if credentials.wallet_id == NO_WALLET_SENTINEL:
            raise NoWalletError()

        self._public_key = credentials.wallet_address
        self._wallet_id = credentials.wallet_id
        self._chain_id = chain_id_for(credentials.network)
        self._client = client or PrivyClient(
            credentials.app_id,
            credentials.app_secret,
            credentials.authorization_key,
            base_url=base_url,
            timeout_s=timeout_s,
        )

    @property
    def public_key(self) -> str:
        return self._public_key

    @property
    def wallet_id(self) -> str:
        return self._wallet_id

    @property
    def chain_id(self) -> str:
        return self._chain_id

    async def sign_transaction(self, transaction: bytes) -> bytes:
        encoded = base64.b64encode(transaction).decode("ascii")
        data = await self._client.sign_transaction(self._wallet_id, encoded)
        signed = data.get("signed_transaction")
        if not isinstance(signed, str):
            raise SigningFailure("signTransaction", "response has no signed_transaction")
        try:
            return base64.b64decode(signed, validate=True)
        except binascii.Error as e:
            raise SigningFailure("signTransaction", "signed_transaction is not base64", e) from e

    async def send_transaction(self, transaction: bytes) -> str:
        encoded = base64.b64encode(transaction).decode("ascii")
        data = await self._client.sign_and_send_transaction(
            self._wallet_id, self._chain_id, encoded
        )
        tx_hash = data.get("hash")
        if not isinstance(tx_hash, str) or not tx_hash:
            raise SigningFailure("signAndSendTransaction", "response has no hash")
        logger.info(f"Submitted transaction {tx_hash} for wallet {self._public_key}")
        return tx_hash

    async def sign_message(self, message: bytes) -> bytes:
        encoded = base64.b64encode(bytes(message)).decode("ascii")
        data = await self._client.sign_message(self._wallet_id, encoded)
        if "signature" not in data:
            raise SigningFailure("signMessage", "response has no signature")
        return normalize_signature(data["signature"], "signMessage")

    async def aclose(self) -> None:
        await self._client.aclose()
