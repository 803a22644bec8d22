"""Minimal Solana transaction wire-format helpers.

What a local signer needs (locate the message bytes, find the required
signers, write a signature into the right slot) for both legacy and
versioned (v0) messages, plus a builder for unsigned SOL transfers.

Layout:
    compact-u16 signature count | 64-byte signatures | message
    message = [version prefix] | 3-byte header | compact-u16 key count | keys | ...
"""

import struct
from dataclasses import dataclass

import base58

SIGNATURE_LENGTH = 64
PUBLIC_KEY_LENGTH = 32
VERSION_PREFIX_MASK = 0x80

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
SYSTEM_TRANSFER_INSTRUCTION = 2


class TransactionFormatError(ValueError):
    """The bytes are not a well-formed Solana transaction."""


def decode_compact_u16(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a compact-u16 ("shortvec") length.

    Returns:
        The decoded value and the offset just past it.
    """
    value = 0
    for i in range(3):
        if offset + i >= len(data):
            raise TransactionFormatError("truncated compact-u16")
        byte = data[offset + i]
        value |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            return value, offset + i + 1
    raise TransactionFormatError("compact-u16 longer than 3 bytes")


def encode_compact_u16(value: int) -> bytes:
    """Encode a length as compact-u16."""
    if not 0 <= value <= 0xFFFF:
        raise TransactionFormatError(f"{value} does not fit in a compact-u16")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


@dataclass(frozen=True)
class ParsedTransaction:
    """Offsets into a serialized transaction."""

    raw: bytes
    signature_count: int
    signatures_offset: int
    message_offset: int

    @property
    def message(self) -> bytes:
        return self.raw[self.message_offset :]

    def signer_keys(self) -> list[bytes]:
        """Public keys of the accounts that must sign, in slot order."""
        message = self.message
        offset = 1 if message and message[0] & VERSION_PREFIX_MASK else 0
        if len(message) < offset + 3:
            raise TransactionFormatError("truncated message header")
        required_signatures = message[offset]
        key_count, offset = decode_compact_u16(message, offset + 3)
        if required_signatures > key_count:
            raise TransactionFormatError("more signers than account keys")
        end = offset + key_count * PUBLIC_KEY_LENGTH
        if end > len(message):
            raise TransactionFormatError("truncated account keys")
        return [
            message[offset + i * PUBLIC_KEY_LENGTH : offset + (i + 1) * PUBLIC_KEY_LENGTH]
            for i in range(required_signatures)
        ]

    def with_signature(self, index: int, signature: bytes) -> bytes:
        """Return the transaction bytes with one signature slot replaced."""
        if len(signature) != SIGNATURE_LENGTH:
            raise TransactionFormatError("signature must be 64 bytes")
        if not 0 <= index < self.signature_count:
            raise TransactionFormatError(f"no signature slot {index}")
        start = self.signatures_offset + index * SIGNATURE_LENGTH
        return self.raw[:start] + signature + self.raw[start + SIGNATURE_LENGTH :]


def parse_transaction(raw: bytes) -> ParsedTransaction:
    """Split a serialized transaction into signature and message sections."""
    count, offset = decode_compact_u16(raw, 0)
    message_offset = offset + count * SIGNATURE_LENGTH
    if message_offset >= len(raw):
        raise TransactionFormatError("transaction has no message")
    return ParsedTransaction(
        raw=bytes(raw),
        signature_count=count,
        signatures_offset=offset,
        message_offset=message_offset,
    )


def _decode_key(value: str, name: str) -> bytes:
    try:
        key = base58.b58decode(value)
    except ValueError as e:
        raise TransactionFormatError(f"{name} is not base58") from e
    if len(key) != PUBLIC_KEY_LENGTH:
        raise TransactionFormatError(f"{name} must decode to {PUBLIC_KEY_LENGTH} bytes")
    return key


def build_transfer_transaction(
    sender: str, recipient: str, lamports: int, recent_blockhash: str
) -> bytes:
    """Build an unsigned legacy transaction moving lamports between accounts.

    The sender is the fee payer and only signer; its signature slot is
    zero-filled for the wallet to fill in.
    """
    if lamports <= 0:
        raise TransactionFormatError("lamports must be positive")

    sender_key = _decode_key(sender, "sender")
    recipient_key = _decode_key(recipient, "recipient")
    program_key = _decode_key(SYSTEM_PROGRAM_ID, "system program")
    blockhash = _decode_key(recent_blockhash, "recent blockhash")

    keys = [sender_key]
    if recipient_key != sender_key:
        keys.append(recipient_key)
    keys.append(program_key)
    account_indices = bytes([0, keys.index(recipient_key)])

    # one signer, no read-only signers, the program is read-only
    header = bytes([1, 0, 1])
    data = struct.pack("<IQ", SYSTEM_TRANSFER_INSTRUCTION, lamports)
    instruction = (
        bytes([len(keys) - 1])
        + encode_compact_u16(len(account_indices))
        + account_indices
        + encode_compact_u16(len(data))
        + data
    )
    message = (
        header
        + encode_compact_u16(len(keys))
        + b"".join(keys)
        + blockhash
        + encode_compact_u16(1)
        + instruction
    )
    return encode_compact_u16(1) + bytes(SIGNATURE_LENGTH) + message
