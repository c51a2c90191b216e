"""
Distributor state record and the initialize operation.

Persisted layout (little-endian for multi-byte integers):

    merkle_root[32] || vault[32] || bump[1] || token_mint[32]
    || total_supply[16] || claimed_bitmap[N] || authority[32]

N is 2 by default (16 claimable indices) and set per distributor at
initialize time. ``from_bytes`` recovers N from the record length.

Lifecycle: created once by initialize (root, mint and supply fixed), then
mutated only by successful claims setting a bitmap bit. Never deleted.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from solders.pubkey import Pubkey

from core.crypto.hashing import HASH_SIZE, sha256, to_hex
from core.crypto.keys import DEFAULT_PROGRAM_ID, derive_authority, new_address
from core.distributor.bitmap import DEFAULT_CAPACITY, ClaimedBitmap
from core.schemas.errors import (
    InsufficientVaultBalanceException,
    InvalidMerkleRootException,
    MalformedInputException,
    MintMismatchException,
    VaultAuthorityMismatchException,
)

if TYPE_CHECKING:
    from core.distributor.ledger import Ledger


logger = logging.getLogger(__name__)

U128_MAX = 2**128 - 1

# Account discriminator prepended by the program runtime
ACCOUNT_DISCRIMINATOR: bytes = sha256(b"account:Distributor")[:8]

# Everything except the bitmap
RECORD_FIXED_SIZE = 32 + 32 + 1 + 32 + 16 + 32


class DistributorStatus(str, Enum):
    """Global lifecycle of a distributor."""
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class DistributorRecord(BaseModel):
    """The persistent distributor account."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    merkle_root: bytes = Field(..., description="32-byte Merkle root")
    vault: Pubkey = Field(..., description="Token account holding the funds")
    bump: int = Field(..., ge=0, le=255, description="Authority derivation nonce")
    token_mint: Pubkey = Field(..., description="Mint being distributed")
    total_supply: int = Field(..., ge=0, le=U128_MAX)
    claimed_bitmap: bytes = Field(..., min_length=1)
    authority: Pubkey = Field(..., description="Derived vault authority")

    @field_validator("merkle_root")
    @classmethod
    def _root_is_32_bytes(cls, v: bytes) -> bytes:
        if len(v) != HASH_SIZE:
            raise ValueError(f"merkle_root must be {HASH_SIZE} bytes, got {len(v)}")
        return v

    @property
    def bitmap(self) -> ClaimedBitmap:
        return ClaimedBitmap(self.claimed_bitmap)

    @property
    def capacity(self) -> int:
        return self.bitmap.capacity

    @property
    def status(self) -> DistributorStatus:
        if self.bitmap.is_full():
            return DistributorStatus.EXHAUSTED
        return DistributorStatus.ACTIVE

    def is_claimed(self, index: int) -> bool:
        return self.bitmap.is_claimed(index)

    def with_claimed(self, index: int) -> "DistributorRecord":
        """Copy of this record with ``index`` marked claimed."""
        return self.model_copy(
            update={"claimed_bitmap": self.bitmap.with_claimed(index).to_bytes()}
        )

    # ------------------------------------------------------------------
    # Binary layout
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        return b"".join([
            self.merkle_root,
            bytes(self.vault),
            bytes([self.bump]),
            bytes(self.token_mint),
            self.total_supply.to_bytes(16, "little"),
            self.claimed_bitmap,
            bytes(self.authority),
        ])

    @classmethod
    def from_bytes(cls, data: bytes) -> "DistributorRecord":
        """
        Decode a record.

        Raises:
            MalformedInputException: If the data is too short to hold a record
        """
        bitmap_len = len(data) - RECORD_FIXED_SIZE
        if bitmap_len < 1:
            raise MalformedInputException(
                f"Distributor record too short: {len(data)} bytes",
                field_path="record",
            )

        offset = 0

        def take(size: int) -> bytes:
            nonlocal offset
            chunk = data[offset:offset + size]
            offset += size
            return chunk

        return cls(
            merkle_root=take(32),
            vault=Pubkey.from_bytes(take(32)),
            bump=take(1)[0],
            token_mint=Pubkey.from_bytes(take(32)),
            total_supply=int.from_bytes(take(16), "little"),
            claimed_bitmap=take(bitmap_len),
            authority=Pubkey.from_bytes(take(32)),
        )

    def to_account_bytes(self) -> bytes:
        """Record prefixed with the account discriminator."""
        return ACCOUNT_DISCRIMINATOR + self.to_bytes()

    @classmethod
    def from_account_bytes(cls, data: bytes) -> "DistributorRecord":
        if data[:8] != ACCOUNT_DISCRIMINATOR:
            raise MalformedInputException(
                "Account discriminator does not match Distributor",
                field_path="record",
            )
        return cls.from_bytes(data[8:])

    def to_summary(self) -> dict[str, Any]:
        """JSON-friendly view."""
        return {
            "merkle_root": to_hex(self.merkle_root),
            "vault": str(self.vault),
            "bump": self.bump,
            "token_mint": str(self.token_mint),
            "total_supply": self.total_supply,
            "claimed_bitmap": to_hex(self.claimed_bitmap),
            "authority": str(self.authority),
            "capacity": self.capacity,
            "claimed_indices": self.bitmap.claimed_indices(),
            "status": self.status.value,
        }


def initialize_distributor(
    ledger: "Ledger",
    merkle_root: bytes,
    total_supply: int,
    token_mint: Pubkey,
    vault: Pubkey,
    *,
    authority: Pubkey | None = None,
    capacity: int = DEFAULT_CAPACITY,
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
    address: Pubkey | None = None,
) -> tuple[Pubkey, DistributorRecord]:
    """
    Create a new distributor committing to ``merkle_root``.

    Preconditions: the vault exists, holds ``token_mint``, is owned by the
    authority derived from the root, and is funded with at least
    ``total_supply``. Every call creates a brand-new independent record.

    Args:
        ledger: Ledger holding token accounts and distributor records
        merkle_root: Root of the finalized distribution tree
        total_supply: Amount committed to the distribution (u128)
        token_mint: Mint being distributed
        vault: Token account holding the funds
        authority: Expected vault authority; must match the derived one
        capacity: Number of claimable indices (rounded up to whole bytes)
        program_id: Program the authority is derived under
        address: Address for the new record (random when omitted)

    Returns:
        (distributor address, record)

    Raises:
        InvalidMerkleRootException: Root is not 32 bytes
        MalformedInputException: Supply or capacity out of range
        MintMismatchException: Vault holds a different mint
        VaultAuthorityMismatchException: Vault/authority not the derived one
        InsufficientVaultBalanceException: Vault holds less than total_supply
        AccountNotFoundException: Vault does not exist
    """
    if not isinstance(merkle_root, bytes) or len(merkle_root) != HASH_SIZE:
        raise InvalidMerkleRootException(
            f"Merkle root must be {HASH_SIZE} bytes",
            details={"length": len(merkle_root) if isinstance(merkle_root, bytes) else None},
        )
    if total_supply < 0 or total_supply > U128_MAX:
        raise MalformedInputException(
            f"total_supply {total_supply} out of u128 range",
            field_path="total_supply",
        )

    bitmap = ClaimedBitmap.empty(capacity)
    derived, bump = derive_authority(merkle_root, program_id)

    if authority is not None and authority != derived:
        raise VaultAuthorityMismatchException(expected=str(derived), actual=str(authority))

    vault_account = ledger.get_token_account(vault)
    if vault_account.mint != token_mint:
        raise MintMismatchException(expected=str(token_mint), actual=str(vault_account.mint))
    if vault_account.owner != derived:
        raise VaultAuthorityMismatchException(expected=str(derived), actual=str(vault_account.owner))
    if vault_account.amount < total_supply:
        raise InsufficientVaultBalanceException(
            required=total_supply, available=vault_account.amount
        )

    record = DistributorRecord(
        merkle_root=merkle_root,
        vault=vault,
        bump=bump,
        token_mint=token_mint,
        total_supply=total_supply,
        claimed_bitmap=bitmap.to_bytes(),
        authority=derived,
    )

    address = address or new_address()
    ledger.create_distributor(address, record)
    logger.info(
        f"Initialized distributor {address} root={to_hex(merkle_root)} "
        f"supply={total_supply} capacity={bitmap.capacity}"
    )
    return address, record


__all__ = [
    "U128_MAX",
    "ACCOUNT_DISCRIMINATOR",
    "RECORD_FIXED_SIZE",
    "DistributorStatus",
    "DistributorRecord",
    "initialize_distributor",
]
