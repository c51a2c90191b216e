"""
API Dependencies

Dependency injection for the API.
Provides the shared ledger, runtime configuration, and input parsing helpers.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from solders.pubkey import Pubkey

from core.config.runtime import RuntimeConfig, load_runtime_config
from core.crypto.hashing import parse_hash32
from core.crypto.keys import parse_address
from core.distributor.claim import ClaimProcessor
from core.distributor.ledger import Ledger
from core.schemas.errors import MalformedInputException

logger = logging.getLogger(__name__)


_ledger: Optional[Ledger] = None
_config: Optional[RuntimeConfig] = None


def get_config() -> RuntimeConfig:
    """Runtime config: config file, then environment overrides."""
    global _config
    if _config is None:
        try:
            _config = load_runtime_config()
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load config file, using defaults: {e}")
            _config = RuntimeConfig().with_env_overrides()
    return _config


def get_ledger() -> Ledger:
    """Process-wide ledger shared by every request."""
    global _ledger
    if _ledger is None:
        _ledger = Ledger()
    return _ledger


def reset_ledger() -> Ledger:
    """Replace the shared ledger with an empty one."""
    global _ledger
    _ledger = Ledger()
    return _ledger


def get_claim_processor() -> ClaimProcessor:
    return ClaimProcessor(get_ledger())


def get_program_id(override: str | None = None) -> Pubkey:
    return parse_address(override or get_config().distributor.program_id, field_path="program_id")


def parse_hash(value: str, field_path: str) -> bytes:
    """Parse a 32-byte hex hash, reporting failures as MALFORMED_INPUT."""
    try:
        return parse_hash32(value)
    except ValueError as e:
        raise MalformedInputException(str(e), field_path=field_path) from e


def parse_proof(values: Sequence[str], field_path: str = "proof") -> list[bytes]:
    return [parse_hash(v, f"{field_path}[{i}]") for i, v in enumerate(values)]
