"""
Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- keccak256 known values
- sort_pair / hash_pair order independence
- to_hex/from_hex and parse_hash32 input forms
"""
import hashlib

import pytest

from core.crypto.hashing import (
    HASH_SIZE,
    keccak256,
    hashv,
    sha256,
    sort_pair,
    hash_pair,
    to_hex,
    from_hex,
    parse_hash32,
)


class TestKeccak256:
    """Tests for keccak256()."""

    def test_empty_input_known_value(self):
        expected = bytes.fromhex(
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )
        assert keccak256(b"") == expected

    def test_abc_known_value(self):
        expected = bytes.fromhex(
            "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"
        )
        assert keccak256(b"abc") == expected

    def test_not_sha3(self):
        """Keccak-256 padding differs from NIST SHA3-256."""
        assert keccak256(b"abc") != hashlib.sha3_256(b"abc").digest()

    def test_hashv_concatenates(self):
        assert hashv([b"ab", b"c"]) == keccak256(b"abc")

    def test_output_size(self):
        assert len(keccak256(b"anything")) == HASH_SIZE


class TestSha256:
    """sha256 is only used for discriminators."""

    def test_matches_hashlib(self):
        assert sha256(b"global:claim") == hashlib.sha256(b"global:claim").digest()


class TestSortPair:
    """Tests for sort_pair() and hash_pair()."""

    def test_sort_pair_orders_bytewise(self):
        low, high = b"\x01" * 32, b"\x02" * 32
        assert sort_pair(high, low) == (low, high)
        assert sort_pair(low, high) == (low, high)

    def test_sort_pair_symmetric(self):
        a = keccak256(b"a")
        b = keccak256(b"b")
        assert sort_pair(a, b) == sort_pair(b, a)

    def test_hash_pair_symmetric(self):
        a = keccak256(b"left")
        b = keccak256(b"right")
        assert hash_pair(a, b) == hash_pair(b, a)

    def test_hash_pair_is_keccak_of_sorted_concat(self):
        a = keccak256(b"x")
        b = keccak256(b"y")
        low, high = sorted([a, b])
        assert hash_pair(a, b) == keccak256(low + high)


class TestHexConversion:
    """Tests for to_hex/from_hex/parse_hash32."""

    def test_round_trip(self):
        data = keccak256(b"round trip")
        assert from_hex(to_hex(data)) == data

    def test_to_hex_prefix(self):
        assert to_hex(b"\xde\xad") == "0xdead"

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("dead")

    def test_from_hex_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_parse_hash32_accepts_bare_hex(self):
        data = keccak256(b"bare")
        assert parse_hash32(data.hex()) == data

    def test_parse_hash32_accepts_int_list(self):
        data = keccak256(b"list")
        assert parse_hash32(list(data)) == data

    def test_parse_hash32_wrong_length(self):
        with pytest.raises(ValueError, match="32 bytes"):
            parse_hash32("0x" + "ab" * 31)

    def test_parse_hash32_bad_byte_list(self):
        with pytest.raises(ValueError):
            parse_hash32([256] * 32)
