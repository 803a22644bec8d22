"""Security: per-connection credential extraction."""

from .credentials import extract_credentials, is_valid_public_key

__all__ = [
    "extract_credentials",
    "is_valid_public_key",
]
