"""Tests for API key hashing utilities."""

import base64
import hashlib

import pytest

from api_key_core.exceptions import ErrorCode, ValidationError
from api_key_core.utils.hash_utils import (
    generate_api_key,
    hash_api_key,
    hash_prefix,
    verify_api_key,
)


class TestHashApiKey:
    """Test hash_api_key."""

    def test_known_digest(self):
        """The hash is the upper-case hex SHA-256 of the UTF-8 bytes."""
        expected = hashlib.sha256(b"abc123").hexdigest().upper()
        assert hash_api_key("abc123") == expected

    def test_deterministic(self):
        assert hash_api_key("same-key") == hash_api_key("same-key")

    def test_fixed_length_and_charset(self):
        for raw in ["", "a", "x" * 10_000, "clé-ünïcødé"]:
            hashed = hash_api_key(raw)
            assert len(hashed) == 64
            assert set(hashed) <= set("0123456789ABCDEF")

    def test_small_change_changes_most_characters(self):
        """One flipped character in the input changes the digest almost everywhere."""
        first = hash_api_key("abc123")
        second = hash_api_key("abc124")
        differing = sum(1 for a, b in zip(first, second) if a != b)
        assert differing > 40

    def test_hash_never_contains_raw_secret(self):
        raw = "ABCDEF"
        assert raw not in hash_api_key(raw)

    def test_non_string_rejected_without_value(self):
        with pytest.raises(ValidationError) as exc_info:
            hash_api_key(b"secret-bytes")

        error = exc_info.value
        assert error.error_code == ErrorCode.TYPE_MISMATCH
        assert "secret-bytes" not in str(error.to_dict())
        assert error.context["value_type"] == "bytes"


class TestVerifyApiKey:
    """Test verify_api_key."""

    def test_matching_key(self):
        assert verify_api_key("abc123", hash_api_key("abc123")) is True

    def test_lower_case_stored_hash_matches(self):
        assert verify_api_key("abc123", hash_api_key("abc123").lower()) is True

    def test_wrong_key(self):
        assert verify_api_key("abc124", hash_api_key("abc123")) is False

    def test_empty_hash(self):
        assert verify_api_key("abc123", "") is False


class TestGenerateApiKey:
    """Test generate_api_key."""

    def test_default_is_32_random_bytes_base64(self):
        key = generate_api_key()
        assert len(base64.b64decode(key)) == 32

    def test_custom_length(self):
        assert len(base64.b64decode(generate_api_key(16))) == 16

    def test_keys_are_unique(self):
        assert len({generate_api_key() for _ in range(50)}) == 50


def test_hash_prefix_is_eight_characters():
    hashed = hash_api_key("abc123")
    assert hash_prefix(hashed) == hashed[:8]
