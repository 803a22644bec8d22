"""Signature normalization.

Custody backends hand back message signatures as base64 text, raw bytes or
a JSON array of byte values. normalize_signature folds all three into bytes.
"""

import base64
import binascii
from collections.abc import Sequence
from typing import Any

from ..core.exceptions import SigningFailure


def normalize_signature(value: Any, operation: str = "signMessage") -> bytes:
    """Return the signature as bytes regardless of how it was encoded.

    Args:
        value: A base64 string, a bytes-like object, or a sequence of ints
            in range 0-255.
        operation: Backend operation name, used in error messages.

    Raises:
        SigningFailure: If the value is none of the supported shapes.
    """
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise SigningFailure(operation, "signature is not valid base64", e) from e

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)

    if isinstance(value, Sequence):
        try:
            return bytes(value)
        except (TypeError, ValueError) as e:
            raise SigningFailure(
                operation, "signature array must hold integers 0-255", e
            ) from e

    raise SigningFailure(
        operation, f"unsupported signature type {type(value).__name__}"
    )
