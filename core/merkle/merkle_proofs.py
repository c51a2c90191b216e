"""
Merkle Proofs Convenience Wrappers
Class-based interfaces over the tree functions, keyed by distribution entry.

This module provides:
- MerkleProver: Generate roots and proofs from LeafEntry lists
- MerkleVerifier: Verify proofs from raw components or entries

Both sides go through core.merkle.leaf_codec and core.crypto.hashing, so the
proof generator and the verifier cannot drift apart.
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.keys import AddressLike
from core.merkle.leaf_codec import LeafEntry, encode_leaf, leaves_for
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_proof,
    build_merkle_root,
    verify_merkle_proof,
    verify_proof,
)


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> entries = entries_from_recipients([{"address": a, "amount": 100}])
        >>> proof = MerkleProver.prove_entry(entries, index=0)
        >>> proof.siblings
        []
    """

    @staticmethod
    def prove_entry(entries: Sequence[LeafEntry], index: int) -> MerkleProof:
        """Generate a proof for the entry at ``index`` of a distribution list."""
        return build_merkle_proof(leaves_for(entries), index)

    @staticmethod
    def compute_root_from_entries(entries: Sequence[LeafEntry]) -> bytes:
        """Compute the Merkle root for a distribution list."""
        return build_merkle_root(leaves_for(entries))


class MerkleVerifier:
    """Convenience class for verifying Merkle proofs."""

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        return verify_merkle_proof(proof)

    @staticmethod
    def verify_claim(
        index: int,
        recipient: AddressLike,
        amount: int,
        siblings: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """
        Verify that (index, recipient, amount) is part of the distribution.

        This is the pre-submission sanity check a client runs before building
        a claim instruction.

        Raises:
            MalformedInputException: If the entry itself cannot be encoded
        """
        leaf = encode_leaf(index, recipient, amount)
        return verify_proof(leaf, siblings, root)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
