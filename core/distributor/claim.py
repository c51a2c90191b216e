"""
Claim processing.

A claim is one state transition against one distributor:

1. Validate the index against the bitmap capacity and the proof shape
2. Recompute the leaf from (index, recipient, amount)
3. Fold the proof to the stored root, else InvalidMerkleRoot
4. Reject if the index bit is already set (AlreadyClaimed)
5. Set the bit and move ``amount`` from the vault to the recipient's token
   account, committed together

Steps 3-5 run under the distributor's lock, and the commit writes the new
bitmap and both balances at once, so a claim either fully applies or leaves
no trace.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from solders.pubkey import Pubkey

from core.crypto.hashing import HASH_SIZE, to_hex
from core.crypto.keys import AddressLike, derive_associated_token_address, parse_address
from core.distributor.ledger import Ledger
from core.merkle.leaf_codec import encode_leaf
from core.merkle.merkle_tree import verify_proof
from core.schemas.errors import (
    AlreadyClaimedException,
    InvalidMerkleRootException,
    MalformedInputException,
    MintMismatchException,
    RecipientAccountMissingException,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimOutcome:
    """Result of a retry-safe claim."""
    index: int
    transferred: int
    already_claimed: bool = False


def _check_proof_shape(proof: Sequence[bytes]) -> list[bytes]:
    siblings = list(proof)
    for i, sibling in enumerate(siblings):
        if not isinstance(sibling, bytes) or len(sibling) != HASH_SIZE:
            raise MalformedInputException(
                f"Proof element {i} must be {HASH_SIZE} bytes",
                field_path=f"proof[{i}]",
            )
    return siblings


class ClaimProcessor:
    """Applies claims against distributors stored in a Ledger."""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def claim(
        self,
        distributor: Pubkey,
        index: int,
        amount: int,
        recipient: AddressLike,
        proof: Sequence[bytes],
        token_account: Pubkey | None = None,
    ) -> int:
        """
        Claim ``amount`` for entry ``index``.

        Args:
            distributor: Distributor record address
            index: Entry index in the distribution list
            amount: Allotted amount for this entry
            recipient: Recipient address committed in the leaf
            proof: Sibling hashes ordered leaf-to-root
            token_account: Receiving token account; defaults to the
                recipient's associated account for the distributor's mint

        Returns:
            Amount transferred

        Raises:
            IndexOutOfRangeException: Index beyond bitmap capacity
            MalformedInputException: Bad proof element, amount, or recipient
            InvalidMerkleRootException: Proof does not fold to the stored root
            AlreadyClaimedException: Index already claimed
            InsufficientVaultBalanceException: Vault cannot cover the amount
            RecipientAccountMissingException: Receiving account not provisioned
        """
        recipient_key = parse_address(recipient, field_path="recipient")
        siblings = _check_proof_shape(proof)

        with self.ledger.lock_for(distributor):
            record = self.ledger.get_distributor(distributor)
            record.bitmap.check_index(index)

            leaf = encode_leaf(index, recipient_key, amount)
            if not verify_proof(leaf, siblings, record.merkle_root):
                logger.warning(
                    f"Rejected claim on {distributor}: index={index} proof does not match "
                    f"root {to_hex(record.merkle_root)}"
                )
                raise InvalidMerkleRootException(leaf_index=index)

            if record.is_claimed(index):
                logger.warning(f"Rejected claim on {distributor}: index={index} already claimed")
                raise AlreadyClaimedException(index)

            destination = token_account or derive_associated_token_address(
                recipient_key, record.token_mint
            )
            if not self.ledger.has_token_account(destination):
                raise RecipientAccountMissingException(str(recipient_key), str(destination))
            dest_account = self.ledger.get_token_account(destination)
            if dest_account.owner != recipient_key:
                raise MalformedInputException(
                    f"Token account {destination} is not owned by {recipient_key}",
                    field_path="token_account",
                )
            if dest_account.mint != record.token_mint:
                raise MintMismatchException(
                    expected=str(record.token_mint), actual=str(dest_account.mint)
                )

            self.ledger.commit_claim(
                distributor,
                record.with_claimed(index),
                destination,
                amount,
            )

        logger.info(f"Claimed index={index} amount={amount} recipient={recipient_key} on {distributor}")
        return amount

    def claim_idempotent(
        self,
        distributor: Pubkey,
        index: int,
        amount: int,
        recipient: AddressLike,
        proof: Sequence[bytes],
        token_account: Pubkey | None = None,
    ) -> ClaimOutcome:
        """
        Retry-safe claim: a retry that hits AlreadyClaimed is a no-op.

        All other errors still propagate.
        """
        try:
            transferred = self.claim(distributor, index, amount, recipient, proof, token_account)
        except AlreadyClaimedException:
            logger.info(f"Claim retry for index={index} on {distributor} already applied")
            return ClaimOutcome(index=index, transferred=0, already_claimed=True)
        return ClaimOutcome(index=index, transferred=transferred)


__all__ = [
    "ClaimOutcome",
    "ClaimProcessor",
]
