"""Data model shared across the server.

Network identifiers, the per-connection credential bundle and the result
of a submitted transaction.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field


class Network(str, Enum):
    """Solana clusters a custody wallet can be bound to."""

    MAINNET = "mainnet"
    DEVNET = "devnet"
    TESTNET = "testnet"


# CAIP-2 chain identifiers, keyed by cluster.
CHAIN_IDS: Mapping[Network, str] = MappingProxyType(
    {
        Network.MAINNET: "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp",
        Network.DEVNET: "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1",
        Network.TESTNET: "solana:4uhcVJyU9pJkvQyS88uRDiswHXSCkY3z",
    }
)


def chain_id_for(network: Network | str) -> str:
    """Return the CAIP-2 chain identifier for a network.

    Raises:
        ValueError: If the network is not one of the known literals.
    """
    return CHAIN_IDS[Network(network)]


class CredentialBundle(BaseModel):
    """Identifiers and secrets addressing one custody wallet.

    Extracted from the headers of a single SSE connection. Secrets are kept
    out of ``repr`` so the bundle can be logged safely.
    """

    model_config = ConfigDict(frozen=True)

    wallet_id: str = Field(min_length=1)
    app_id: str = Field(min_length=1)
    app_secret: str = Field(min_length=1, repr=False)
    authorization_key: str = Field(min_length=1, repr=False)
    wallet_address: str = Field(min_length=1)
    network: Network = Network.MAINNET


@dataclass(frozen=True)
class SendResult:
    """Outcome of a sign-and-send call."""

    signature: str
