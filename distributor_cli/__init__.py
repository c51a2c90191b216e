"""
Merkle Distributor CLI

Command-line interface for building distributions and claim instructions.

Usage:
    python -m distributor_cli build recipients.json --out ./dist
    python -m distributor_cli verify --root 0x.. --index 0 --recipient <addr> --amount 100 --proof proof-0.json
    python -m distributor_cli authority 0x..
    python -m distributor_cli instruction claim ...
"""

__version__ = "0.1.0"
