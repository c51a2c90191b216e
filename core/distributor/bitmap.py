"""
Claimed-set bitmap.

Bit ``i`` lives in byte ``i // 8`` under mask ``1 << (i % 8)``. A bit is set
if and only if the entry at index ``i`` has been claimed; bits are never
cleared.

The byte length is chosen at initialization time from the distribution's
capacity instead of being hardcoded.
"""
from __future__ import annotations

from core.schemas.errors import (
    AlreadyClaimedException,
    IndexOutOfRangeException,
    MalformedInputException,
)


DEFAULT_CAPACITY = 16


def bitmap_size_for(capacity: int) -> int:
    """Number of bytes needed to track ``capacity`` indices."""
    if capacity < 1:
        raise MalformedInputException(
            f"Bitmap capacity must be at least 1, got {capacity}",
            field_path="capacity",
        )
    return (capacity + 7) // 8


def is_claimed(bitmap: bytes, index: int) -> bool:
    """Check a raw bitmap for ``index`` (False when beyond its length)."""
    byte_index = index // 8
    if index < 0 or byte_index >= len(bitmap):
        return False
    return (bitmap[byte_index] & (1 << (index % 8))) != 0


class ClaimedBitmap:
    """Immutable view over claimed-bitmap bytes."""

    __slots__ = ("_data",)

    def __init__(self, data: bytes):
        self._data = bytes(data)

    @classmethod
    def empty(cls, capacity: int = DEFAULT_CAPACITY) -> "ClaimedBitmap":
        return cls(bytes(bitmap_size_for(capacity)))

    @property
    def capacity(self) -> int:
        return len(self._data) * 8

    def check_index(self, index: int) -> None:
        if index < 0 or index >= self.capacity:
            raise IndexOutOfRangeException(index, self.capacity)

    def is_claimed(self, index: int) -> bool:
        self.check_index(index)
        return is_claimed(self._data, index)

    def with_claimed(self, index: int) -> "ClaimedBitmap":
        """
        Return a new bitmap with ``index`` set.

        Raises:
            IndexOutOfRangeException: If index exceeds capacity
            AlreadyClaimedException: If the bit is already set
        """
        if self.is_claimed(index):
            raise AlreadyClaimedException(index)
        data = bytearray(self._data)
        data[index // 8] |= 1 << (index % 8)
        return ClaimedBitmap(bytes(data))

    def claimed_indices(self) -> list[int]:
        return [i for i in range(self.capacity) if is_claimed(self._data, i)]

    def count(self) -> int:
        return sum(bin(b).count("1") for b in self._data)

    def is_full(self) -> bool:
        """True when every representable index is set."""
        return all(b == 0xFF for b in self._data)

    def to_bytes(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ClaimedBitmap):
            return self._data == other._data
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._data)

    def __repr__(self) -> str:
        return f"ClaimedBitmap(capacity={self.capacity}, claimed={self.claimed_indices()})"


__all__ = [
    "DEFAULT_CAPACITY",
    "bitmap_size_for",
    "is_claimed",
    "ClaimedBitmap",
]
