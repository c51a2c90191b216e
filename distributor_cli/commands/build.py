"""
CLI Build Command

Build the Merkle tree for a recipient list and write the artifacts the
claim flow needs:

    <out>/merkle-root.txt      root as 0x-hex
    <out>/proof-<i>.json       sibling list for entry i, leaf-to-root
    <out>/distribution.json    full plan (entries, leaves, proofs, authority)

Usage:
    distributor build recipients.json [--out DIR] [--program-id ID] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from core.crypto.hashing import to_hex
from core.crypto.keys import parse_address
from core.distributor.ledger import format_amount
from core.merkle.distribution import DistributionPlan, build_distribution


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def load_recipients(path: Path) -> list[dict[str, Any]]:
    """
    Read a recipient list.

    Accepts either a bare ``[{address, amount}, ...]`` array or an object
    with a ``recipients`` key.
    """
    with open(path, "r") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("recipients")
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of {{address, amount}} objects")
    return data


def write_artifacts(plan: DistributionPlan, out_dir: Path) -> list[Path]:
    """Write root, per-entry proofs and the full plan. Returns written paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    root_path = out_dir / "merkle-root.txt"
    root_path.write_text(to_hex(plan.root), encoding="utf-8")
    written.append(root_path)

    for entry in plan.entries:
        proof_path = out_dir / f"proof-{entry.index}.json"
        siblings = [to_hex(s) for s in plan.proof(entry.index).siblings]
        proof_path.write_text(json.dumps(siblings), encoding="utf-8")
        written.append(proof_path)

    plan_path = out_dir / "distribution.json"
    plan_path.write_text(json.dumps(plan.to_dict(), indent=2), encoding="utf-8")
    written.append(plan_path)

    return written


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.cli_config
    recipients_path = Path(args.recipients)

    if not recipients_path.exists():
        print(f"Error: Recipient list not found: {recipients_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        recipients = load_recipients(recipients_path)
    except (OSError, ValueError) as e:
        print(f"Error reading recipients: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    program_id = parse_address(args.program_id or config.distributor.program_id, "program_id")
    plan = build_distribution(recipients, program_id=program_id)

    capacity = config.distributor.default_capacity
    if not plan.fits_capacity(capacity):
        logger.warning(
            f"{len(plan.entries)} entries exceed the default claim capacity of {capacity}; "
            f"initialize with a larger capacity"
        )

    written: list[Path] = []
    if args.out:
        written = write_artifacts(plan, Path(args.out))
        logger.info(f"Wrote {len(written)} files to {args.out}")

    if args.json:
        print(json.dumps(plan.to_dict(), indent=2))
        return EXIT_SUCCESS

    decimals = config.distributor.token_decimals
    print(f"merkle_root: {to_hex(plan.root)}")
    print(f"authority: {plan.authority} (bump {plan.bump})")
    print(f"entries: {len(plan.entries)}")
    print(f"total_amount: {plan.total_amount} ({format_amount(plan.total_amount, decimals)})")
    print(f"depth: {plan.tree.depth}")
    if written:
        print(f"\nwritten ({len(written)}):")
        for path in written:
            print(f"  {path}")

    return EXIT_SUCCESS
