"""
Core cryptographic utilities.

Hashing (Keccak-256, sorted-pair parent rule) and key derivation
(vault authority, associated token accounts).
"""
from .hashing import (
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
