"""
Distribution plan: the off-chain artifact produced from a recipient list.

Building a plan freezes the recipient list: entries get their indices, the
tree is built once, and every proof is read off that one tree.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from solders.pubkey import Pubkey

from core.crypto.hashing import to_hex
from core.crypto.keys import DEFAULT_PROGRAM_ID, derive_authority
from core.merkle.leaf_codec import LeafEntry, entries_from_recipients, leaves_for
from core.merkle.merkle_tree import MerkleProof, MerkleTree, verify_merkle_proof


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionPlan:
    """Frozen recipient list with its tree, root and derived authority."""
    entries: tuple[LeafEntry, ...]
    tree: MerkleTree
    authority: Pubkey
    bump: int
    program_id: Pubkey

    @property
    def root(self) -> bytes:
        return self.tree.root

    @property
    def total_amount(self) -> int:
        return sum(entry.amount for entry in self.entries)

    def proof(self, index: int) -> MerkleProof:
        return self.tree.proof(index)

    def entry_for(self, recipient: Pubkey) -> LeafEntry:
        for entry in self.entries:
            if entry.recipient == recipient:
                return entry
        raise KeyError(f"Recipient {recipient} is not part of this distribution")

    def fits_capacity(self, capacity: int) -> bool:
        return len(self.entries) <= capacity

    def to_dict(self) -> dict[str, Any]:
        return {
            "merkle_root": to_hex(self.root),
            "authority": str(self.authority),
            "bump": self.bump,
            "program_id": str(self.program_id),
            "total_amount": self.total_amount,
            "depth": self.tree.depth,
            "claims": [
                {
                    **entry.to_dict(),
                    "leaf": to_hex(entry.leaf()),
                    "proof": [to_hex(s) for s in self.proof(entry.index).siblings],
                }
                for entry in self.entries
            ],
        }


def build_distribution(
    recipients: Sequence[dict[str, Any]],
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
) -> DistributionPlan:
    """
    Build a distribution plan from an ordered ``[{address, amount}]`` list.

    Every generated proof is verified against the root before the plan is
    returned.

    Raises:
        MalformedInputException: Bad or duplicate recipient
        ValueError: Empty recipient list
    """
    entries = entries_from_recipients(recipients)
    if not entries:
        raise ValueError("Recipient list is empty")

    tree = MerkleTree(leaves_for(entries))
    authority, bump = derive_authority(tree.root, program_id)

    for proof in tree.proofs():
        if not verify_merkle_proof(proof):
            raise RuntimeError(f"Generated proof for index {proof.index} does not verify")

    logger.info(f"Built distribution of {len(entries)} entries root={to_hex(tree.root)}")
    return DistributionPlan(
        entries=tuple(entries),
        tree=tree,
        authority=authority,
        bump=bump,
        program_id=program_id,
    )


__all__ = [
    "DistributionPlan",
    "build_distribution",
]
