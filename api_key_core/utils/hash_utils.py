"""
Hash utilities for API keys.

This module provides the one-way transformation used both when a key is
provisioned and when a presented key is validated. Both call sites must use
``hash_api_key`` so their output is byte-identical for the same input.
"""

import base64
import hashlib
import secrets

from ..constants import Defaults
from ..exceptions import ErrorCode, ValidationError


def hash_api_key(raw_key: str) -> str:
    """
    Calculate the stored hash of a raw API key.

    Args:
        raw_key: The plaintext key as presented by the client

    Returns:
        Upper-case hex SHA-256 digest of the UTF-8 encoded key (64 characters)

    Raises:
        ValidationError: If raw_key is not a string
    """
    if not isinstance(raw_key, str):
        # The value is deliberately left out of the error context
        raise ValidationError(
            "API key must be a string",
            error_code=ErrorCode.TYPE_MISMATCH,
            field="raw_key",
            value_type=type(raw_key).__name__,
        )

    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest().upper()


def verify_api_key(raw_key: str, hashed_key: str) -> bool:
    """
    Check a raw key against a stored hash using a constant-time comparison.

    Args:
        raw_key: Plaintext key to verify
        hashed_key: Stored hash

    Returns:
        True if the key hashes to hashed_key
    """
    if not hashed_key:
        return False
    return secrets.compare_digest(hash_api_key(raw_key), hashed_key.upper())


def generate_api_key(num_bytes: int = Defaults.GENERATED_KEY_BYTES) -> str:
    """
    Generate a new random API key.

    Args:
        num_bytes: Number of random bytes (default: 32)

    Returns:
        Base64 encoded random key. Only returned once; store its hash.
    """
    return base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")


def hash_prefix(hashed_key: str) -> str:
    """Short prefix of a hash, safe to include in log output."""
    return hashed_key[: Defaults.LOGGED_HASH_PREFIX]
