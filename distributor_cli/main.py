"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m distributor_cli build recipients.json [--out DIR] [--json]
    python -m distributor_cli verify --root R --index I --recipient A --amount N --proof FILE
    python -m distributor_cli authority <root> [--mint MINT]
    python -m distributor_cli instruction initialize --root R --supply N ...
    python -m distributor_cli instruction claim --root R --index I ...
    python -m distributor_cli config --init

Environment Variables:
    DISTRIBUTOR_PROGRAM_ID              Program the vault authority derives under
    DISTRIBUTOR_DEFAULT_CAPACITY        Claimable indices per distributor (default: 16)
    DISTRIBUTOR_VERIFY_BEFORE_SUBMIT    Check proofs before building claims (default: true)
    DISTRIBUTOR_LOG_LEVEL               Log level (default: INFO)
    DISTRIBUTOR_LOG_FILE                Optional log file
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.schemas.errors import DistributorException, ErrorCodes
from distributor_cli.commands import authority, build, instruction, verify
from distributor_cli.config import get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def _add_program_id(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--program-id",
        type=str,
        default=None,
        help="Program address (default: from config)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="distributor",
        description="Merkle Distributor CLI - Build distributions, verify proofs, and prepare instructions.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./distributor.json or ~/.config/distributor/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build the Merkle tree and proofs for a recipient list",
        description="Assign indices, build the tree, and write the root and per-entry proofs.",
    )
    build_parser.add_argument(
        "recipients",
        type=str,
        help="JSON file with an ordered [{address, amount}] list",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Directory for merkle-root.txt, proof-<i>.json and distribution.json",
    )
    _add_program_id(build_parser)
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output the full plan as JSON",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a claim proof offline",
        description="Recompute the leaf and walk the proof to the root.",
    )
    verify_parser.add_argument("--root", type=str, required=True, help="Merkle root (hex)")
    verify_parser.add_argument("--index", type=int, required=True, help="Entry index")
    verify_parser.add_argument("--recipient", type=str, required=True, help="Recipient address")
    verify_parser.add_argument("--amount", type=int, required=True, help="Amount in base units")
    verify_parser.add_argument("--proof", type=str, required=True, help="Proof JSON file")
    verify_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- authority command ---
    authority_parser = subparsers.add_parser(
        "authority",
        help="Derive the vault authority for a root",
    )
    authority_parser.add_argument("root", type=str, help="Merkle root (hex)")
    authority_parser.add_argument("--mint", type=str, default=None, help="Also derive the vault for this mint")
    _add_program_id(authority_parser)
    authority_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    authority_parser.set_defaults(func=authority.authority_cmd)

    # --- instruction command ---
    ix_parser = subparsers.add_parser(
        "instruction",
        help="Build unsigned instructions",
        description="Print initialize or claim instructions as JSON for a signer.",
    )
    ix_subparsers = ix_parser.add_subparsers(dest="instruction_name", help="Instruction to build")

    # instruction initialize
    ix_init = ix_subparsers.add_parser("initialize", help="Initialize instruction")
    ix_init.add_argument("--root", type=str, required=True, help="Merkle root (hex)")
    ix_init.add_argument("--supply", type=int, required=True, help="Total supply in base units")
    ix_init.add_argument("--distributor", type=str, required=True, help="New distributor record address")
    ix_init.add_argument("--vault", type=str, required=True, help="Vault token account")
    ix_init.add_argument("--payer", type=str, required=True, help="Fee payer")
    ix_init.add_argument("--mint", type=str, required=True, help="Token mint")
    _add_program_id(ix_init)
    ix_init.set_defaults(func=instruction.instruction_initialize_cmd)

    # instruction claim
    ix_claim = ix_subparsers.add_parser("claim", help="Claim instruction")
    ix_claim.add_argument("--root", type=str, required=True, help="Merkle root (hex)")
    ix_claim.add_argument("--index", type=int, required=True, help="Entry index")
    ix_claim.add_argument("--amount", type=int, required=True, help="Amount in base units")
    ix_claim.add_argument("--recipient", type=str, required=True, help="Recipient address")
    ix_claim.add_argument("--proof", type=str, required=True, help="Proof JSON file")
    ix_claim.add_argument("--distributor", type=str, required=True, help="Distributor record address")
    ix_claim.add_argument("--vault", type=str, required=True, help="Vault token account")
    ix_claim.add_argument("--mint", type=str, required=True, help="Token mint")
    ix_claim.add_argument(
        "--token-account",
        type=str,
        default=None,
        help="Receiving account (default: recipient's associated account)",
    )
    ix_claim.add_argument(
        "--no-verify",
        action="store_true",
        default=False,
        help="Skip the offline proof check",
    )
    _add_program_id(ix_claim)
    ix_claim.set_defaults(func=instruction.instruction_claim_cmd)

    ix_parser.set_defaults(func=lambda args: ix_parser.print_help() or EXIT_SUCCESS)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="distributor.json",
        help="Path for config file (default: distributor.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (DISTRIBUTOR_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: distributor config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except DistributorException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        if e.code == ErrorCodes.INVALID_MERKLE_ROOT:
            return EXIT_VERIFICATION_FAILED
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if logging.getLogger().isEnabledFor(logging.DEBUG):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
