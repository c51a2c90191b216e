"""
Hashing Utilities
Keccak-256 hashing and the sorted-pair rule shared by tree building and
proof verification.

This module provides:
- Keccak-256 hashing for raw bytes and byte sequences (hashv)
- sort_pair / hash_pair: canonical parent hashing for Merkle nodes
- SHA-256 for Anchor-style discriminators
- Hex encoding/decoding with 0x prefix

Determinism Notes:
- Parent hashing never depends on structural left/right position:
  hash_pair(a, b) == hash_pair(b, a)
- The off-chain tree builder and the on-chain verifier both import
  hash_pair from here; there is no second copy of the rule.
"""
from __future__ import annotations

import hashlib
from typing import Iterable

from eth_utils import keccak


HASH_SIZE = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute the Keccak-256 digest of raw bytes.

    This is the original Keccak padding (as used by Ethereum and by
    Solana's ``keccak::hashv``), not NIST SHA3-256.

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def hashv(parts: Iterable[bytes]) -> bytes:
    """Keccak-256 over the concatenation of several byte strings."""
    return keccak256(b"".join(parts))


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Only used for instruction/account discriminators, never for tree nodes.
    """
    return hashlib.sha256(data).digest()


def sort_pair(a: bytes, b: bytes) -> tuple[bytes, bytes]:
    """
    Order two sibling hashes ascending (lexicographic byte order).

    Args:
        a: First child hash
        b: Second child hash

    Returns:
        (smaller, larger); equal inputs are returned as-is
    """
    if a <= b:
        return a, b
    return b, a


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Compute a Merkle parent hash: keccak256(sort_pair(a, b)).

    Args:
        a: One child hash (32 bytes)
        b: The other child hash (32 bytes)

    Returns:
        32-byte parent hash
    """
    left, right = sort_pair(a, b)
    return keccak256(left + right)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def parse_hash32(value: str | bytes | list[int]) -> bytes:
    """
    Parse a 32-byte hash from hex (with or without 0x), raw bytes, or a
    list of ints (the JSON byte-array form of a proof element).

    Raises:
        ValueError: If the value does not decode to exactly 32 bytes
    """
    if isinstance(value, bytes):
        raw = value
    elif isinstance(value, list):
        if not all(isinstance(b, int) and 0 <= b <= 255 for b in value):
            raise ValueError("Byte list must contain integers in 0..255")
        raw = bytes(value)
    elif isinstance(value, str):
        raw = from_hex(value if value.startswith("0x") else "0x" + value)
    else:
        raise ValueError(f"Unsupported hash type: {type(value).__name__}")

    if len(raw) != HASH_SIZE:
        raise ValueError(f"Expected {HASH_SIZE} bytes, got {len(raw)}")
    return raw


__all__ = [
    "HASH_SIZE",
    "keccak256",
    "hashv",
    "sha256",
    "sort_pair",
    "hash_pair",
    "to_hex",
    "from_hex",
    "parse_hash32",
]
