"""
CLI Instruction Commands

Build unsigned initialize/claim instructions as JSON for a signer.

Usage:
    distributor instruction initialize --root R --supply N --distributor D --vault V --payer P --mint M
    distributor instruction claim --root R --index I --amount N --recipient A --proof FILE \
        --distributor D --vault V --mint M [--token-account T] [--no-verify]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path

from core.crypto.hashing import parse_hash32
from core.crypto.keys import derive_associated_token_address, parse_address
from core.distributor.instructions import (
    ClaimArgs,
    InitializeArgs,
    build_claim_instruction,
    build_initialize_instruction,
    instruction_to_dict,
)
from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.errors import InvalidMerkleRootException, MalformedInputException
from distributor_cli.commands.verify import load_proof


logger = logging.getLogger(__name__)


EXIT_SUCCESS = 0


def _root(value: str) -> bytes:
    try:
        return parse_hash32(value)
    except ValueError as e:
        raise MalformedInputException(str(e), field_path="root") from e


def _program_id(args: Namespace):
    return parse_address(args.program_id or args.cli_config.distributor.program_id, "program_id")


def instruction_initialize_cmd(args: Namespace) -> int:
    """Print an unsigned initialize instruction."""
    ix_args = InitializeArgs(merkle_root=_root(args.root), total_supply=args.supply)
    ix = build_initialize_instruction(
        ix_args,
        distributor=parse_address(args.distributor, "distributor"),
        vault=parse_address(args.vault, "vault"),
        payer=parse_address(args.payer, "payer"),
        token_mint=parse_address(args.mint, "mint"),
        program_id=_program_id(args),
    )
    print(json.dumps({**instruction_to_dict(ix), "args": ix_args.to_dict()}, indent=2))
    return EXIT_SUCCESS


def instruction_claim_cmd(args: Namespace) -> int:
    """
    Print an unsigned claim instruction.

    The proof is checked against the root first unless ``--no-verify`` is
    given or verification is disabled in config.
    """
    root = _root(args.root)
    recipient = parse_address(args.recipient, "recipient")
    mint = parse_address(args.mint, "mint")
    ix_args = ClaimArgs(index=args.index, amount=args.amount, proof=load_proof(Path(args.proof)))

    verify = args.cli_config.distributor.verify_before_submit and not args.no_verify
    if verify and not MerkleVerifier.verify_claim(
        ix_args.index, recipient, ix_args.amount, ix_args.proof, root
    ):
        raise InvalidMerkleRootException(leaf_index=ix_args.index)

    token_account = (
        parse_address(args.token_account, "token_account")
        if args.token_account
        else derive_associated_token_address(recipient, mint)
    )
    ix = build_claim_instruction(
        ix_args,
        distributor=parse_address(args.distributor, "distributor"),
        merkle_root=root,
        vault=parse_address(args.vault, "vault"),
        user_token_account=token_account,
        token_mint=mint,
        program_id=_program_id(args),
    )
    logger.debug(f"Built claim instruction for index {ix_args.index}")
    print(json.dumps({**instruction_to_dict(ix), "args": ix_args.to_dict()}, indent=2))
    return EXIT_SUCCESS
