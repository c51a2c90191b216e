"""
Tree Routes

Off-chain tree building and proof verification.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from api.deps import get_program_id, parse_hash, parse_proof
from api.errors import InvalidRequestError
from api.models.requests import BuildTreeRequest, VerifyProofRequest
from api.models.responses import ClaimEntry, TreeResponse, VerifyProofResponse
from core.crypto.hashing import to_hex
from core.merkle.distribution import build_distribution
from core.merkle.leaf_codec import encode_leaf
from core.merkle.merkle_tree import verify_proof


logger = logging.getLogger(__name__)

router = APIRouter(tags=["tree"])


@router.post("/tree", response_model=TreeResponse)
async def build_tree(request: BuildTreeRequest) -> TreeResponse:
    """
    Build the Merkle tree for an ordered recipient list.

    Returns the root, the derived vault authority, and a proof per entry.
    """
    plan = build_distribution(
        [r.model_dump() for r in request.recipients],
        program_id=get_program_id(request.program_id),
    )
    data = plan.to_dict()
    return TreeResponse(
        merkle_root=data["merkle_root"],
        authority=data["authority"],
        bump=data["bump"],
        program_id=data["program_id"],
        total_amount=data["total_amount"],
        depth=data["depth"],
        claims=[ClaimEntry(**c) for c in data["claims"]],
    )


@router.post("/proof/verify", response_model=VerifyProofResponse)
async def verify(request: VerifyProofRequest) -> VerifyProofResponse:
    """
    Check a proof against a root.

    The leaf is taken as given, or recomputed from index/recipient/amount.
    """
    root = parse_hash(request.root, "root")
    siblings = parse_proof(request.proof)

    if request.leaf is not None:
        leaf = parse_hash(request.leaf, "leaf")
    elif None not in (request.index, request.recipient, request.amount):
        leaf = encode_leaf(request.index, request.recipient, request.amount)
    else:
        raise InvalidRequestError("Provide either 'leaf' or all of 'index', 'recipient', 'amount'")

    valid = verify_proof(leaf, siblings, root)
    logger.debug(f"Proof check leaf={to_hex(leaf)} valid={valid}")
    return VerifyProofResponse(valid=valid, leaf=to_hex(leaf))
