"""Per-connection custody credentials.

Each SSE client names its own Privy wallet through request headers. This
module turns those headers into a validated CredentialBundle without any
network or disk I/O, so a rejected connection never reaches the custody
backend.
"""

import logging
from collections.abc import Mapping

import base58

from ..core.exceptions import NoWalletError, ValidationError
from ..core.types import CredentialBundle, Network

logger = logging.getLogger(__name__)

WALLET_ID_HEADER = "X-Privy-Wallet-Id"
APP_ID_HEADER = "X-Privy-App-Id"
APP_SECRET_HEADER = "X-Privy-App-Secret"
AUTHORIZATION_KEY_HEADER = "X-Privy-Authorization-Private-Key"
WALLET_ADDRESS_HEADER = "X-Wallet-Address"
NETWORK_HEADER = "X-Network"

# Clients without a custody wallet send this instead of an id.
NO_WALLET_SENTINEL = "none"

PUBLIC_KEY_LENGTH = 32


def is_valid_public_key(address: str) -> bool:
    """Check that a string is a base58-encoded 32-byte public key."""
    try:
        return len(base58.b58decode(address)) == PUBLIC_KEY_LENGTH
    except ValueError:
        return False


def _required(headers: Mapping[str, str], name: str) -> str:
    value = (headers.get(name.lower()) or "").strip()
    if not value:
        raise ValidationError(name, f"Missing required header: {name}")
    return value


def extract_credentials(headers: Mapping[str, str]) -> CredentialBundle:
    """Build a CredentialBundle from connection headers.

    Headers are checked in a fixed order and the first problem wins:
    wallet id, app id, app secret, authorization key, wallet address,
    network.

    Args:
        headers: Request headers (any case).

    Returns:
        The validated bundle.

    Raises:
        NoWalletError: Wallet id absent or equal to the "none" sentinel.
        ValidationError: Any other header missing or invalid.
    """
    normalized = {key.lower(): value for key, value in headers.items()}

    wallet_id = (normalized.get(WALLET_ID_HEADER.lower()) or "").strip()
    if not wallet_id or wallet_id == NO_WALLET_SENTINEL:
        raise NoWalletError(WALLET_ID_HEADER)

    app_id = _required(normalized, APP_ID_HEADER)
    app_secret = _required(normalized, APP_SECRET_HEADER)
    authorization_key = _required(normalized, AUTHORIZATION_KEY_HEADER)

    wallet_address = _required(normalized, WALLET_ADDRESS_HEADER)
    if not is_valid_public_key(wallet_address):
        raise ValidationError(
            WALLET_ADDRESS_HEADER,
            f"Invalid {WALLET_ADDRESS_HEADER}: not a base58 public key",
        )

    raw_network = (normalized.get(NETWORK_HEADER.lower()) or "").strip()
    if raw_network:
        try:
            network = Network(raw_network)
        except ValueError:
            allowed = ", ".join(n.value for n in Network)
            raise ValidationError(
                NETWORK_HEADER,
                f"Invalid {NETWORK_HEADER}: '{raw_network}' (expected one of {allowed})",
            ) from None
    else:
        network = Network.MAINNET

    logger.debug(f"Extracted credentials for wallet {wallet_address} on {network.value}")
    return CredentialBundle(
        wallet_id=wallet_id,
        app_id=app_id,
        app_secret=app_secret,
        authorization_key=authorization_key,
        wallet_address=wallet_address,
        network=network,
    )
