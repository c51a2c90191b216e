"""
Merkle Tree and Leaf Encoding
Sorted-pair Merkle tree construction + proof generation/verification.

This module provides:
- LeafEntry / encode_leaf: deterministic leaf encoding
- build_merkle_root: Compute root from leaf hashes
- build_merkle_proof: Generate proof for a specific leaf
- verify_proof / verify_merkle_proof: Verify a proof against a root
- MerkleTree: cached levels for repeated proof generation

Canonical Commitment Rules:
1. Leaf: keccak256(u32LE(index) || recipient[32] || u64LE(amount))
2. Parent: keccak256(sort_pair(a, b))
3. Odd node: promoted unchanged to the next level
4. Single leaf: root = leaf, empty proof

Usage:
    from core.merkle import MerkleTree, entries_from_recipients, leaves_for

    entries = entries_from_recipients(recipients)
    tree = MerkleTree(leaves_for(entries))
    proof = tree.proof(2)
    assert verify_proof(proof.leaf, proof.siblings, tree.root)
"""
from .leaf_codec import (
    U32_MAX,
    U64_MAX,
    LeafEntry,
    encode_leaf,
    encode_leaf_preimage,
    entries_from_recipients,
    leaves_for,
)

from .merkle_tree import (
    MerkleProof,
    MerkleTree,
    merkle_parent,
    build_merkle_levels,
    build_merkle_root,
    build_merkle_proof,
    verify_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)

from .distribution import (
    DistributionPlan,
    build_distribution,
)


__all__ = [
    # Leaf encoding
    "U32_MAX",
    "U64_MAX",
    "LeafEntry",
    "encode_leaf",
    "encode_leaf_preimage",
    "entries_from_recipients",
    "leaves_for",
    # Core types
    "MerkleProof",
    "MerkleTree",
    # Core functions
    "merkle_parent",
    "build_merkle_levels",
    "build_merkle_root",
    "build_merkle_proof",
    "verify_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
    # Off-chain plan
    "DistributionPlan",
    "build_distribution",
]
