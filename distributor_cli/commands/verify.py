"""
CLI Verify Command

Check a claim's proof against a root offline.

Usage:
    distributor verify --root R --index I --recipient A --amount N --proof FILE [--json]

Exit code 2 means the proof does not reconstruct the root.
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from pathlib import Path
from typing import Any

from core.crypto.hashing import parse_hash32, to_hex
from core.merkle.leaf_codec import encode_leaf
from core.merkle.merkle_tree import verify_proof
from core.schemas.errors import MalformedInputException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def load_proof(path: Path) -> list[bytes]:
    """
    Read a proof file.

    Accepts the ``proof-<i>.json`` list written by ``build`` (hex strings or
    32-int arrays) or an object carrying a ``proof`` key.
    """
    with open(path, "r") as f:
        data: Any = json.load(f)

    if isinstance(data, dict):
        data = data.get("proof")
    if not isinstance(data, list):
        raise MalformedInputException(f"{path}: expected a list of hashes", field_path="proof")

    siblings = []
    for i, item in enumerate(data):
        try:
            siblings.append(parse_hash32(item))
        except ValueError as e:
            raise MalformedInputException(str(e), field_path=f"proof[{i}]") from e
    return siblings


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    try:
        root = parse_hash32(args.root)
    except ValueError as e:
        raise MalformedInputException(str(e), field_path="root") from e

    siblings = load_proof(Path(args.proof))
    leaf = encode_leaf(args.index, args.recipient, args.amount)
    valid = verify_proof(leaf, siblings, root)

    if args.json:
        print(json.dumps({
            "valid": valid,
            "index": args.index,
            "leaf": to_hex(leaf),
            "root": to_hex(root),
        }, indent=2))
    else:
        print(f"leaf: {to_hex(leaf)}")
        print(f"root: {to_hex(root)}")
        print(f"valid: {str(valid).lower()}")

    if valid:
        logger.info(f"Proof for index {args.index} verified")
        return EXIT_SUCCESS

    logger.warning(f"Proof for index {args.index} does not reconstruct the root")
    return EXIT_VERIFICATION_FAILED
