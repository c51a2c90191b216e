"""
Leaf Codec
Deterministic encoding of one distribution entry into a 32-byte tree leaf.

Byte layout (fixed width, 44 bytes before hashing):
    u32LE(index) || recipient[32] || u64LE(amount)

leaf = keccak256(layout)

Any change to field order or width breaks compatibility between proofs
generated off-chain and the on-chain verifier.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Sequence

from solders.pubkey import Pubkey

from core.crypto.hashing import keccak256
from core.crypto.keys import AddressLike, parse_address
from core.schemas.errors import MalformedInputException


U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

_INDEX_FORMAT = "<I"
_AMOUNT_FORMAT = "<Q"


def _check_range(value: int, upper: int, field_path: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputException(
            f"{field_path} must be an integer, got {type(value).__name__}",
            field_path=field_path,
        )
    if value < 0 or value > upper:
        raise MalformedInputException(
            f"{field_path} {value} out of range 0..{upper}",
            field_path=field_path,
        )


def encode_leaf_preimage(index: int, recipient: AddressLike, amount: int) -> bytes:
    """Return the 44-byte preimage hashed into a leaf."""
    _check_range(index, U32_MAX, "index")
    _check_range(amount, U64_MAX, "amount")
    pubkey = parse_address(recipient, field_path="recipient")
    return (
        struct.pack(_INDEX_FORMAT, index)
        + bytes(pubkey)
        + struct.pack(_AMOUNT_FORMAT, amount)
    )


def encode_leaf(index: int, recipient: AddressLike, amount: int) -> bytes:
    """
    Encode (index, recipient, amount) into a 32-byte leaf hash.

    Args:
        index: Position of the entry in the canonical recipient list (u32)
        recipient: 32-byte recipient address
        amount: Allotted amount in base units (u64)

    Returns:
        32-byte leaf hash

    Raises:
        MalformedInputException: If index/amount overflow their width or the
            recipient is not a canonical 32-byte address
    """
    return keccak256(encode_leaf_preimage(index, recipient, amount))


@dataclass(frozen=True)
class LeafEntry:
    """
    One entry of a frozen distribution list.

    Attributes:
        index: Position in the canonical recipient list; never reused
        recipient: Recipient address
        amount: Allotted amount in base units
    """
    index: int
    recipient: Pubkey
    amount: int

    def __post_init__(self) -> None:
        _check_range(self.index, U32_MAX, "index")
        _check_range(self.amount, U64_MAX, "amount")
        if not isinstance(self.recipient, Pubkey):
            object.__setattr__(
                self, "recipient", parse_address(self.recipient, field_path="recipient")
            )

    def leaf(self) -> bytes:
        """Leaf hash of this entry."""
        return encode_leaf(self.index, self.recipient, self.amount)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "recipient": str(self.recipient),
            "amount": self.amount,
        }


def entries_from_recipients(recipients: Sequence[dict[str, Any]]) -> list[LeafEntry]:
    """
    Assign indices to an ordered recipient list.

    Each item needs ``address`` and ``amount``; the index is the position in
    the sequence. Duplicate addresses are rejected.

    Raises:
        MalformedInputException: On a missing field, bad value, or duplicate
    """
    entries: list[LeafEntry] = []
    seen: set[Pubkey] = set()

    for position, item in enumerate(recipients):
        if "address" not in item or "amount" not in item:
            raise MalformedInputException(
                f"Recipient #{position} needs 'address' and 'amount'",
                field_path=f"recipients[{position}]",
            )
        amount = item["amount"]
        if isinstance(amount, str) and amount.strip().isdigit():
            amount = int(amount.strip())
        entry = LeafEntry(
            index=position,
            recipient=parse_address(item["address"], field_path=f"recipients[{position}].address"),
            amount=amount,
        )
        if entry.recipient in seen:
            raise MalformedInputException(
                f"Duplicate recipient address {entry.recipient}",
                field_path=f"recipients[{position}].address",
            )
        seen.add(entry.recipient)
        entries.append(entry)

    return entries


def leaves_for(entries: Sequence[LeafEntry]) -> list[bytes]:
    """Leaf hashes in entry order."""
    return [entry.leaf() for entry in entries]


__all__ = [
    "U32_MAX",
    "U64_MAX",
    "LeafEntry",
    "encode_leaf_preimage",
    "encode_leaf",
    "entries_from_recipients",
    "leaves_for",
]
