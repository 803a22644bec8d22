"""
Solana JSON-RPC client.

Thin async wrapper over the handful of RPC methods the built-in actions and
the local keypair wallet need. One client is shared by the whole process;
it holds no wallet state.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from .core.exceptions import RpcError
from .observability import traced_operation

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class SolanaRpcClient:
    """
    Client for a Solana RPC node.

    Calls are single attempts; errors surface as RpcError.

    Usage:
        rpc = SolanaRpcClient("https://api.devnet.solana.com")
        lamports = await rpc.get_balance(address)
        await rpc.close()
    """

    def __init__(
        self,
        rpc_url: str,
        timeout_s: float = 30.0,
        commitment: str = "confirmed",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url
        self._timeout_s = timeout_s
        self._commitment = commitment
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Make one JSON-RPC call and return its ``result`` member."""
        client = await self._get_client()
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        with traced_operation(f"rpc.{method}"):
            try:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise RpcError(method, f"timed out after {self._timeout_s}s", e) from e
            except httpx.HTTPStatusError as e:
                raise RpcError(method, f"HTTP {e.response.status_code}") from e
            except (httpx.HTTPError, ValueError) as e:
                raise RpcError(method, "request failed", e) from e

        if "error" in data:
            error = data["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise RpcError(method, message)

        return data.get("result")

    async def get_balance(self, address: str) -> int:
        """Balance of an account in lamports."""
        result = await self.call(
            "getBalance", [address, {"commitment": self._commitment}]
        )
        return int(result["value"])

    async def get_latest_blockhash(self) -> str:
        """Most recent blockhash, base58 encoded."""
        result = await self.call(
            "getLatestBlockhash", [{"commitment": self._commitment}]
        )
        try:
            return result["value"]["blockhash"]
        except (KeyError, TypeError) as e:
            raise RpcError("getLatestBlockhash", "response has no blockhash") from e

    async def get_token_accounts_by_owner(self, owner: str) -> list[dict[str, Any]]:
        """SPL token accounts held by ``owner``, as jsonParsed account entries."""
        result = await self.call(
            "getTokenAccountsByOwner",
            [
                owner,
                {"programId": TOKEN_PROGRAM_ID},
                {"encoding": "jsonParsed", "commitment": self._commitment},
            ],
        )
        return list(result["value"])

    async def send_transaction(self, signed_transaction: bytes) -> str:
        """Submit a signed transaction and return its signature."""
        encoded = base64.b64encode(signed_transaction).decode("ascii")
        signature = await self.call(
            "sendTransaction",
            [
                encoded,
                {"encoding": "base64", "preflightCommitment": self._commitment},
            ],
        )
        if not signature:
            raise RpcError("sendTransaction", "no signature returned")
        return signature

    async def get_tps(self) -> float:
        """Transactions per second over the most recent performance sample."""
        samples = await self.call("getRecentPerformanceSamples", [1])
        if not samples:
            raise RpcError("getRecentPerformanceSamples", "no samples returned")
        sample = samples[0]
        period = sample.get("samplePeriodSecs") or 0
        if period <= 0:
            raise RpcError("getRecentPerformanceSamples", "sample period is zero")
        return sample["numTransactions"] / period

    async def request_airdrop(self, address: str, lamports: int) -> str:
        """Request test funds (devnet/testnet only)."""
        return await self.call(
            "requestAirdrop", [address, lamports, {"commitment": self._commitment}]
        )
