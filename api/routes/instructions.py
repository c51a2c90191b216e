"""
Instruction Routes

Build unsigned instruction payloads for the signing/submission collaborator.
"""

from __future__ import annotations

from fastapi import APIRouter
from solders.instruction import Instruction

from api.deps import get_config, get_program_id, parse_hash, parse_proof
from api.models.requests import ClaimInstructionRequest, InitializeInstructionRequest
from api.models.responses import AccountMetaModel, InstructionResponse
from core.crypto.keys import derive_associated_token_address, parse_address
from core.distributor.instructions import (
    ClaimArgs,
    InitializeArgs,
    build_claim_instruction,
    build_initialize_instruction,
    instruction_to_dict,
)
from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.errors import InvalidMerkleRootException


router = APIRouter(prefix="/instructions", tags=["instructions"])


def _to_response(ix: Instruction, args: dict) -> InstructionResponse:
    data = instruction_to_dict(ix)
    return InstructionResponse(
        program_id=data["program_id"],
        accounts=[AccountMetaModel(**a) for a in data["accounts"]],
        data=data["data"],
        args=args,
    )


@router.post("/initialize", response_model=InstructionResponse)
async def initialize_instruction(request: InitializeInstructionRequest) -> InstructionResponse:
    args = InitializeArgs(
        merkle_root=parse_hash(request.merkle_root, "merkle_root"),
        total_supply=request.total_supply,
    )
    ix = build_initialize_instruction(
        args,
        distributor=parse_address(request.distributor, "distributor"),
        vault=parse_address(request.vault, "vault"),
        payer=parse_address(request.payer, "payer"),
        token_mint=parse_address(request.token_mint, "token_mint"),
        program_id=get_program_id(),
    )
    return _to_response(ix, args.to_dict())


@router.post("/claim", response_model=InstructionResponse)
async def claim_instruction(request: ClaimInstructionRequest) -> InstructionResponse:
    """
    Build a claim instruction.

    When ``verify_before_submit`` is configured the proof is checked against
    the root first, so a stale proof fails here instead of on submission.
    """
    merkle_root = parse_hash(request.merkle_root, "merkle_root")
    recipient = parse_address(request.recipient, "recipient")
    mint = parse_address(request.token_mint, "token_mint")
    args = ClaimArgs(index=request.index, amount=request.amount, proof=parse_proof(request.proof))

    if get_config().distributor.verify_before_submit and not MerkleVerifier.verify_claim(
        args.index, recipient, args.amount, args.proof, merkle_root
    ):
        raise InvalidMerkleRootException(leaf_index=args.index)

    user_token_account = (
        parse_address(request.user_token_account, "user_token_account")
        if request.user_token_account
        else derive_associated_token_address(recipient, mint)
    )
    ix = build_claim_instruction(
        args,
        distributor=parse_address(request.distributor, "distributor"),
        merkle_root=merkle_root,
        vault=parse_address(request.vault, "vault"),
        user_token_account=user_token_account,
        token_mint=mint,
        program_id=get_program_id(),
    )
    return _to_response(ix, args.to_dict())
