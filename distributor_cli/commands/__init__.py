"""
CLI command modules.
"""

from distributor_cli.commands import build, verify, authority, instruction

__all__ = ["build", "verify", "authority", "instruction"]
