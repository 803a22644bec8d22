"""Built-in actions.

Small wrappers over the session wallet and the RPC client. Richer domain
actions (token deployment, trading, NFT minting, ...) are contributed as
additional bundles.
"""

from typing import Any

import base58

from ..agent import SolanaAgent
from ..core.exceptions import ValidationError
from ..rpc import LAMPORTS_PER_SOL
from ..security import is_valid_public_key
from ..wallets.transaction import build_transfer_transaction
from .base import ActionBundle, action


def _sol_amount(args: dict[str, Any], default: float | None = None) -> float:
    """Read ``amount`` in SOL; must be positive when given."""
    value = args.get("amount")
    if value is None:
        if default is None:
            raise ValidationError("amount", "amount is required")
        return default
    amount = float(value)
    if amount <= 0:
        raise ValidationError("amount", "amount must be greater than zero")
    return amount


def _address(args: dict[str, Any], name: str) -> str:
    address = args[name]
    if not is_valid_public_key(address):
        raise ValidationError(name, f"{name} is not a valid Solana address")
    return address


@action("WALLET_ADDRESS", "Get the public address of the connected wallet", {})
async def wallet_address(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    """Return the session wallet's address."""
    return {"address": agent.wallet_address}


@action(
    "BALANCE",
    "Get the SOL balance of a wallet (defaults to the connected wallet)",
    {"address": str},
    optional=["address"],
)
async def balance(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    """Return an account balance in lamports and SOL."""
    address = args.get("address") or agent.wallet_address
    lamports = await agent.rpc.get_balance(address)
    return {
        "address": address,
        "lamports": lamports,
        "sol": lamports / LAMPORTS_PER_SOL,
    }


@action(
    "TOKEN_BALANCES",
    "Get the SOL and SPL token balances of a wallet (defaults to the connected wallet)",
    {"address": str},
    optional=["address"],
)
async def token_balances(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    """Return the SOL balance plus one entry per token account."""
    address = args.get("address") or agent.wallet_address
    lamports = await agent.rpc.get_balance(address)
    accounts = await agent.rpc.get_token_accounts_by_owner(address)

    tokens = []
    for entry in accounts:
        info = entry["account"]["data"]["parsed"]["info"]
        amount = info["tokenAmount"]
        tokens.append(
            {
                "mint": info["mint"],
                "amount": amount.get("uiAmount") or 0,
                "decimals": amount["decimals"],
            }
        )
    return {"address": address, "sol": lamports / LAMPORTS_PER_SOL, "tokens": tokens}


@action("GET_TPS", "Get the current transactions per second of the network", {})
async def get_tps(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    return {"tps": round(await agent.rpc.get_tps(), 2)}


@action(
    "REQUEST_FUNDS",
    "Request SOL from the faucet on devnet or testnet",
    {"amount": float},
    optional=["amount"],
)
async def request_funds(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    amount = _sol_amount(args, default=1.0)
    signature = await agent.rpc.request_airdrop(
        agent.wallet_address, int(amount * LAMPORTS_PER_SOL)
    )
    return {"address": agent.wallet_address, "amount": amount, "signature": signature}


@action(
    "TRANSFER",
    "Transfer SOL from the connected wallet to another address",
    {"to": str, "amount": float},
)
async def transfer(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    """Build a SystemProgram transfer, then sign and submit it through the wallet."""
    recipient = _address(args, "to")
    amount = _sol_amount(args)
    lamports = round(amount * LAMPORTS_PER_SOL)
    if lamports <= 0:
        raise ValidationError("amount", "amount is smaller than one lamport")

    blockhash = await agent.rpc.get_latest_blockhash()
    transaction = build_transfer_transaction(
        agent.wallet_address, recipient, lamports, blockhash
    )
    result = await agent.wallet.sign_and_send_transaction(transaction)
    return {
        "from": agent.wallet_address,
        "to": recipient,
        "amount": amount,
        "signature": result.signature,
    }


@action(
    "SIGN_MESSAGE",
    "Sign a UTF-8 message with the connected wallet",
    {"message": str},
)
async def sign_message(agent: SolanaAgent, args: dict[str, Any]) -> dict[str, Any]:
    """Sign a message and return the base58 signature."""
    signature = await agent.wallet.sign_message(args["message"].encode("utf-8"))
    return {
        "address": agent.wallet_address,
        "signature": base58.b58encode(signature).decode("ascii"),
    }


CORE_BUNDLE = ActionBundle(
    name="core",
    actions=(
        wallet_address,
        balance,
        token_balances,
        get_tps,
        request_funds,
        transfer,
        sign_message,
    ),
)
