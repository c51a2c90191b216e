"""
Distributor Routes

Initialize distributors, inspect them, and claim against them.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from solders.pubkey import Pubkey

from api.deps import get_claim_processor, get_config, get_ledger, get_program_id, parse_hash, parse_proof
from api.models.requests import ClaimRequest, InitializeRequest
from api.models.responses import ClaimResponse, DistributorListResponse, DistributorResponse
from core.crypto.keys import derive_associated_token_address, derive_authority, new_address, parse_address
from core.distributor.bitmap import bitmap_size_for
from core.distributor.ledger import U64_MAX, Ledger
from core.distributor.state import DistributorRecord, initialize_distributor
from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.errors import InvalidMerkleRootException, MalformedInputException


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/distributors", tags=["distributors"])


def _to_response(address: Pubkey, record: DistributorRecord, ledger: Ledger) -> DistributorResponse:
    summary = record.to_summary()
    return DistributorResponse(
        address=str(address),
        vault_balance=ledger.balance(record.vault),
        **summary,
    )


@router.post("", response_model=DistributorResponse, status_code=201)
def create_distributor(request: InitializeRequest) -> DistributorResponse:
    """
    Initialize a new distributor.

    With ``fund_vault`` the vault (associated account of the derived
    authority) is created and credited with ``total_supply`` first. Inputs
    are validated before the vault is touched.
    """
    ledger = get_ledger()
    config = get_config()
    program_id = get_program_id()

    merkle_root = parse_hash(request.merkle_root, "merkle_root")
    mint = parse_address(request.token_mint, "token_mint") if request.token_mint else new_address()
    capacity = request.capacity or config.distributor.default_capacity
    bitmap_size_for(capacity)
    authority, _bump = derive_authority(merkle_root, program_id)
    vault = derive_associated_token_address(authority, mint)

    if request.fund_vault:
        if request.total_supply > U64_MAX:
            raise MalformedInputException(
                f"total_supply {request.total_supply} exceeds what a token account can hold",
                field_path="total_supply",
            )
        ledger.create_token_account(authority, mint, vault)
        ledger.mint_to(vault, request.total_supply)

    address, record = initialize_distributor(
        ledger,
        merkle_root,
        request.total_supply,
        mint,
        vault,
        capacity=capacity,
        program_id=program_id,
    )
    return _to_response(address, record, ledger)


@router.get("", response_model=DistributorListResponse)
def list_distributors() -> DistributorListResponse:
    ledger = get_ledger()
    return DistributorListResponse(
        distributors=[_to_response(a, r, ledger) for a, r in ledger.all_distributors()]
    )


@router.get("/{address}", response_model=DistributorResponse)
def get_distributor(address: str) -> DistributorResponse:
    ledger = get_ledger()
    key = parse_address(address, "address")
    return _to_response(key, ledger.get_distributor(key), ledger)


@router.post("/{address}/claim", response_model=ClaimResponse)
def claim(address: str, request: ClaimRequest) -> ClaimResponse:
    """
    Claim an entry.

    Errors keep their protocol codes: INVALID_MERKLE_ROOT, ALREADY_CLAIMED,
    INDEX_OUT_OF_RANGE, INSUFFICIENT_VAULT_BALANCE, MALFORMED_INPUT.
    """
    ledger = get_ledger()
    processor = get_claim_processor()

    key = parse_address(address, "address")
    recipient = parse_address(request.recipient, "recipient")
    proof = parse_proof(request.proof)
    record = ledger.get_distributor(key)

    token_account = derive_associated_token_address(recipient, record.token_mint)
    if request.create_token_account and not ledger.has_token_account(token_account):
        # Only provision for a claim that would pass the proof check
        record.bitmap.check_index(request.index)
        if not MerkleVerifier.verify_claim(
            request.index, recipient, request.amount, proof, record.merkle_root
        ):
            raise InvalidMerkleRootException(leaf_index=request.index)
        ledger.create_token_account(recipient, record.token_mint, token_account)

    if request.idempotent:
        outcome = processor.claim_idempotent(key, request.index, request.amount, recipient, proof, token_account)
        transferred, already_claimed = outcome.transferred, outcome.already_claimed
    else:
        transferred = processor.claim(key, request.index, request.amount, recipient, proof, token_account)
        already_claimed = False

    return ClaimResponse(
        index=request.index,
        transferred=transferred,
        already_claimed=already_claimed,
        token_account=str(token_account),
        vault_balance=ledger.balance(record.vault),
    )
