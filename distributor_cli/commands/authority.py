"""
CLI Authority Command

Print the vault authority derived for a root, and optionally the vault
address for a mint.

Usage:
    distributor authority <root> [--mint MINT] [--program-id ID] [--json]
"""

from __future__ import annotations

import json
from argparse import Namespace

from core.crypto.hashing import parse_hash32
from core.crypto.keys import derive_associated_token_address, derive_authority, parse_address
from core.schemas.errors import MalformedInputException


EXIT_SUCCESS = 0


def authority_cmd(args: Namespace) -> int:
    try:
        root = parse_hash32(args.root)
    except ValueError as e:
        raise MalformedInputException(str(e), field_path="root") from e

    program_id = parse_address(args.program_id or args.cli_config.distributor.program_id, "program_id")
    authority, bump = derive_authority(root, program_id)

    result = {
        "authority": str(authority),
        "bump": bump,
        "program_id": str(program_id),
    }
    if args.mint:
        mint = parse_address(args.mint, "mint")
        result["vault"] = str(derive_associated_token_address(authority, mint))

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        for key, value in result.items():
            print(f"{key}: {value}")

    return EXIT_SUCCESS
