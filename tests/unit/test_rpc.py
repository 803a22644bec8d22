"""Tests for the Solana JSON-RPC client."""

import base64

import httpx
import pytest

from solana_mcp.core.exceptions import RpcError
from solana_mcp.rpc import LAMPORTS_PER_SOL, TOKEN_PROGRAM_ID, SolanaRpcClient

pytestmark = pytest.mark.asyncio


async def test_get_balance(rpc_factory) -> None:
    calls: list[dict] = []
    rpc = rpc_factory({"getBalance": {"context": {"slot": 1}, "value": 2 * LAMPORTS_PER_SOL}}, calls)

    assert await rpc.get_balance("addr") == 2_000_000_000
    assert calls[0]["jsonrpc"] == "2.0"
    assert calls[0]["params"] == ["addr", {"commitment": "confirmed"}]
    await rpc.close()


async def test_get_latest_blockhash(rpc_factory) -> None:
    calls: list[dict] = []
    rpc = rpc_factory(
        {"getLatestBlockhash": {"value": {"blockhash": "9hash", "lastValidBlockHeight": 7}}}, calls
    )

    assert await rpc.get_latest_blockhash() == "9hash"
    assert calls[0]["params"] == [{"commitment": "confirmed"}]


async def test_get_latest_blockhash_without_value(rpc_factory) -> None:
    rpc = rpc_factory({"getLatestBlockhash": {"context": {"slot": 1}}})

    with pytest.raises(RpcError, match="no blockhash"):
        await rpc.get_latest_blockhash()


async def test_get_token_accounts_by_owner(rpc_factory) -> None:
    calls: list[dict] = []
    rpc = rpc_factory({"getTokenAccountsByOwner": {"value": [{"pubkey": "acct"}]}}, calls)

    assert await rpc.get_token_accounts_by_owner("owner") == [{"pubkey": "acct"}]
    assert calls[0]["params"][:2] == ["owner", {"programId": TOKEN_PROGRAM_ID}]
    assert calls[0]["params"][2]["encoding"] == "jsonParsed"


async def test_request_ids_increase(rpc_factory) -> None:
    calls: list[dict] = []
    rpc = rpc_factory({"getBalance": {"value": 0}}, calls)

    await rpc.get_balance("a")
    await rpc.get_balance("b")

    assert [c["id"] for c in calls] == [1, 2]


async def test_send_transaction_encodes_base64(rpc_factory) -> None:
    calls: list[dict] = []
    rpc = rpc_factory({"sendTransaction": "5sig"}, calls)

    assert await rpc.send_transaction(b"signed") == "5sig"
    assert calls[0]["params"][0] == base64.b64encode(b"signed").decode()


async def test_send_transaction_without_signature(rpc_factory) -> None:
    rpc = rpc_factory({"sendTransaction": None})

    with pytest.raises(RpcError):
        await rpc.send_transaction(b"signed")


async def test_get_tps(rpc_factory) -> None:
    rpc = rpc_factory(
        {"getRecentPerformanceSamples": [{"numTransactions": 1200, "samplePeriodSecs": 60}]}
    )
    assert await rpc.get_tps() == 20.0


async def test_get_tps_without_samples(rpc_factory) -> None:
    rpc = rpc_factory({"getRecentPerformanceSamples": []})

    with pytest.raises(RpcError):
        await rpc.get_tps()


async def test_request_airdrop(rpc_factory) -> None:
    calls: list[dict] = []
    rpc = rpc_factory({"requestAirdrop": "airdrop-sig"}, calls)

    assert await rpc.request_airdrop("addr", LAMPORTS_PER_SOL) == "airdrop-sig"
    assert calls[0]["params"][:2] == ["addr", LAMPORTS_PER_SOL]


async def test_json_rpc_error(rpc_factory) -> None:
    rpc = rpc_factory({"getBalance": RuntimeError("Invalid param")})

    with pytest.raises(RpcError) as exc_info:
        await rpc.get_balance("addr")

    assert exc_info.value.method == "getBalance"
    assert "Invalid param" in exc_info.value.message


async def test_http_error() -> None:
    rpc = SolanaRpcClient(
        "http://rpc.test", transport=httpx.MockTransport(lambda r: httpx.Response(503))
    )

    with pytest.raises(RpcError) as exc_info:
        await rpc.call("getSlot")

    assert "503" in exc_info.value.message


async def test_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("slow")

    rpc = SolanaRpcClient("http://rpc.test", timeout_s=1.5, transport=httpx.MockTransport(handler))

    with pytest.raises(RpcError) as exc_info:
        await rpc.call("getSlot")

    assert "timed out after 1.5s" in exc_info.value.message


async def test_close_is_idempotent(rpc_factory) -> None:
    rpc = rpc_factory({"getSlot": 1})
    await rpc.call("getSlot")

    await rpc.close()
    await rpc.close()
