"""
Merkle Tree Implementation
Deterministic sorted-pair Merkle tree construction, proof generation, and
verification.

This module provides:
- Deterministic Merkle root computation
- Merkle proof generation for any leaf index
- Merkle proof verification
- Promote-unpaired rule for odd node counts

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: see core.merkle.leaf_codec.encode_leaf
2. Parent hashing: parent = keccak256(sort_pair(a, b))
   - Children are ordered ascending before concatenation, so the parent
     does not depend on which child sits on the left
3. Odd rule: a trailing unpaired node is promoted unchanged to the next
   level (no duplication); it contributes no sibling to the proof
4. Empty leaves: no root; a distribution needs at least one entry
5. Single leaf: root = leaf, proof = []

Determinism Notes:
- Nodes are paired at fixed positions (2k, 2k+1)
- This module never sorts leaves; the caller's order is the index order
- Proofs are index-bound: rebuild from the same ordered leaf sequence
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from core.crypto.hashing import HASH_SIZE, hash_pair


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    Attributes:
        leaf: The leaf hash being proven (32 bytes)
        index: The 0-based index of the leaf in the original leaf list
        siblings: Sibling hashes ordered leaf-to-root (not sorted)
        root: The Merkle root this proof is against
    """
    leaf: bytes
    index: int
    siblings: list[bytes] = field(default_factory=list)
    root: bytes = b""

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")


def merkle_parent(a: bytes, b: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Order-independent: merkle_parent(a, b) == merkle_parent(b, a).
    """
    return hash_pair(a, b)


def _next_level(level: Sequence[bytes]) -> list[bytes]:
    next_level: list[bytes] = []
    for i in range(0, len(level) - 1, 2):
        next_level.append(merkle_parent(level[i], level[i + 1]))
    if len(level) % 2 == 1:
        # Promote the unpaired node unchanged
        next_level.append(level[-1])
    return next_level


def build_merkle_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first, root level last.

    Raises:
        ValueError: If leaves is empty or a leaf is not 32 bytes
    """
    if len(leaves) == 0:
        raise ValueError("Cannot build a Merkle tree from an empty leaf list")

    for i, leaf in enumerate(leaves):
        if len(leaf) != HASH_SIZE:
            raise ValueError(f"Leaf {i} must be {HASH_SIZE} bytes, got {len(leaf)}")

    levels: list[list[bytes]] = [list(leaves)]
    while len(levels[-1]) > 1:
        levels.append(_next_level(levels[-1]))
    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Example: [a, b, c] -> [parent(a, b), c] -> parent(parent(a, b), c)

    Args:
        leaves: Sequence of 32-byte leaf hashes. Order matters and is preserved.

    Returns:
        32-byte Merkle root
    """
    return build_merkle_levels(leaves)[-1][0]


def _proof_from_levels(levels: list[list[bytes]], index: int) -> MerkleProof:
    siblings: list[bytes] = []
    current_index = index

    for level in levels[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
        current_index = current_index // 2

    return MerkleProof(
        leaf=levels[0][index],
        index=index,
        siblings=siblings,
        root=levels[-1][0],
    )


def build_merkle_proof(leaves: Sequence[bytes], index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Walks the same structure as build_merkle_root and records, at each level,
    the sibling of the target's position if one exists.

    Raises:
        IndexError: If index is out of range
        ValueError: If leaves is empty
    """
    if len(leaves) == 0:
        raise ValueError("Cannot generate proof for empty leaf list")

    if index < 0 or index >= len(leaves):
        raise IndexError(
            f"Leaf index {index} out of range for {len(leaves)} leaves"
        )

    return _proof_from_levels(build_merkle_levels(leaves), index)


def verify_proof(leaf: bytes, siblings: Sequence[bytes], root: bytes) -> bool:
    """
    Fold a leaf through its siblings and compare with a known root.

    Each step is merkle_parent(current, sibling); there is no partial match.
    A sibling or root that is not 32 bytes never verifies.
    """
    if len(leaf) != HASH_SIZE or len(root) != HASH_SIZE:
        return False

    current_hash = leaf
    for sibling in siblings:
        if len(sibling) != HASH_SIZE:
            return False
        current_hash = merkle_parent(current_hash, sibling)

    return current_hash == root


def verify_merkle_proof(proof: MerkleProof) -> bool:
    """Verify a MerkleProof against the root it carries."""
    return verify_proof(proof.leaf, proof.siblings, proof.root)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of hashing levels above the leaves: ceil(log2(num_leaves)).

    This is the maximum proof length. A leaf promoted past a level has a
    shorter proof.
    """
    if num_leaves <= 1:
        return 0
    return (num_leaves - 1).bit_length()


class MerkleTree:
    """
    A built tree over one frozen leaf sequence.

    Levels are computed once; proofs for any index are then read off the
    cached levels instead of rebuilding the tree each time.
    """

    def __init__(self, leaves: Sequence[bytes]):
        self._levels = build_merkle_levels(leaves)

    @property
    def leaves(self) -> list[bytes]:
        return list(self._levels[0])

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def depth(self) -> int:
        return len(self._levels) - 1

    def __len__(self) -> int:
        return len(self._levels[0])

    def proof(self, index: int) -> MerkleProof:
        if index < 0 or index >= len(self):
            raise IndexError(f"Leaf index {index} out of range for {len(self)} leaves")
        return _proof_from_levels(self._levels, index)

    def proofs(self) -> list[MerkleProof]:
        return [self.proof(i) for i in range(len(self))]


__all__ = [
    "MerkleProof",
    "MerkleTree",
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "verify_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
