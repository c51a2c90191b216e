"""
Distributor program: state record, claimed bitmap, ledger, claims, and
instruction payloads.

Usage:
    from core.distributor import Ledger, ClaimProcessor, initialize_distributor

    ledger = Ledger()
    address, record = initialize_distributor(ledger, root, supply, mint, vault)
    ClaimProcessor(ledger).claim(address, index, amount, recipient, proof)
"""
from .bitmap import DEFAULT_CAPACITY, ClaimedBitmap, bitmap_size_for, is_claimed
from .state import (
    ACCOUNT_DISCRIMINATOR,
    DistributorRecord,
    DistributorStatus,
    initialize_distributor,
)
from .ledger import Ledger, TokenAccount
from .claim import ClaimOutcome, ClaimProcessor
from .instructions import (
    CLAIM_DISCRIMINATOR,
    INITIALIZE_DISCRIMINATOR,
    ClaimArgs,
    InitializeArgs,
    build_claim_instruction,
    build_initialize_instruction,
    instruction_to_dict,
)

__all__ = [
    "DEFAULT_CAPACITY",
    "ClaimedBitmap",
    "bitmap_size_for",
    "is_claimed",
    "ACCOUNT_DISCRIMINATOR",
    "DistributorRecord",
    "DistributorStatus",
    "initialize_distributor",
    "Ledger",
    "TokenAccount",
    "ClaimOutcome",
    "ClaimProcessor",
    "CLAIM_DISCRIMINATOR",
    "INITIALIZE_DISCRIMINATOR",
    "ClaimArgs",
    "InitializeArgs",
    "build_claim_instruction",
    "build_initialize_instruction",
    "instruction_to_dict",
]
