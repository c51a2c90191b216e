"""
Claimed Bitmap Unit Tests
Tests for core/distributor/bitmap.py
"""
import pytest

from core.distributor.bitmap import (
    DEFAULT_CAPACITY,
    ClaimedBitmap,
    bitmap_size_for,
    is_claimed,
)
from core.schemas.errors import (
    AlreadyClaimedException,
    IndexOutOfRangeException,
    MalformedInputException,
)


class TestLayout:

    def test_default_is_two_bytes(self):
        bitmap = ClaimedBitmap.empty()
        assert len(bitmap) == 2
        assert bitmap.capacity == DEFAULT_CAPACITY == 16

    @pytest.mark.parametrize("capacity, size", [(1, 1), (8, 1), (9, 2), (16, 2), (17, 3), (1000, 125)])
    def test_size_for_capacity(self, capacity, size):
        assert bitmap_size_for(capacity) == size

    def test_zero_capacity_rejected(self):
        with pytest.raises(MalformedInputException):
            bitmap_size_for(0)

    def test_bit_position(self):
        bitmap = ClaimedBitmap.empty().with_claimed(0).with_claimed(9)
        assert bitmap.to_bytes() == bytes([0b00000001, 0b00000010])

    def test_raw_helper(self):
        assert is_claimed(bytes([0b100]), 2)
        assert not is_claimed(bytes([0b100]), 1)
        assert not is_claimed(bytes([0xFF]), 8)


class TestTransitions:

    def test_with_claimed_is_copy(self):
        empty = ClaimedBitmap.empty()
        updated = empty.with_claimed(3)
        assert not empty.is_claimed(3)
        assert updated.is_claimed(3)
        assert updated.claimed_indices() == [3]

    def test_double_claim_rejected(self):
        bitmap = ClaimedBitmap.empty().with_claimed(5)
        with pytest.raises(AlreadyClaimedException):
            bitmap.with_claimed(5)

    def test_last_index_in_range(self):
        bitmap = ClaimedBitmap.empty(16)
        assert bitmap.with_claimed(15).is_claimed(15)

    def test_index_at_capacity_rejected(self):
        bitmap = ClaimedBitmap.empty(16)
        with pytest.raises(IndexOutOfRangeException) as exc_info:
            bitmap.with_claimed(16)
        assert exc_info.value.details == {"index": 16, "capacity": 16}

    def test_full(self):
        bitmap = ClaimedBitmap.empty(8)
        for i in range(8):
            assert not bitmap.is_full()
            bitmap = bitmap.with_claimed(i)
        assert bitmap.is_full()
        assert bitmap.count() == 8

    def test_equality(self):
        assert ClaimedBitmap.empty().with_claimed(1) == ClaimedBitmap(bytes([2, 0]))
