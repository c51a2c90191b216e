"""
Runtime Configuration

Central configuration for the distributor program, off-chain tooling,
and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "DISTRIBUTOR_"

DEFAULT_PROGRAM_ID = "5zp47zmoPwVa55PXtP5kr7URsNRMUqnhiPLLnyo5M9AQ"


@dataclass
class DistributorConfig:
    """Configuration for the distribution program."""
    program_id: str = DEFAULT_PROGRAM_ID
    # Claimable indices per distributor; 16 keeps the 2-byte bitmap layout
    default_capacity: int = 16
    # Verify proofs off-chain before building a claim instruction
    verify_before_submit: bool = True
    token_decimals: int = 9


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class ApiConfig:
    """Configuration for the HTTP API."""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML or JSON file
    - Programmatic construction
    """
    distributor: DistributorConfig = field(default_factory=DistributorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - DISTRIBUTOR_PROGRAM_ID: Program address authorities derive under
        - DISTRIBUTOR_DEFAULT_CAPACITY: Claimable indices per distributor
        - DISTRIBUTOR_VERIFY_BEFORE_SUBMIT: Off-chain proof check (true/false)
        - DISTRIBUTOR_TOKEN_DECIMALS: Decimals used for display
        - DISTRIBUTOR_LOG_LEVEL: Log level
        - DISTRIBUTOR_LOG_FILE: Optional log file
        - DISTRIBUTOR_API_HOST / DISTRIBUTOR_API_PORT: API bind address
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}PROGRAM_ID"):
            overrides.setdefault("distributor", {})["program_id"] = os.getenv(f"{ENV_PREFIX}PROGRAM_ID")
        if os.getenv(f"{ENV_PREFIX}DEFAULT_CAPACITY"):
            overrides.setdefault("distributor", {})["default_capacity"] = int(
                os.getenv(f"{ENV_PREFIX}DEFAULT_CAPACITY", "16")
            )
        if os.getenv(f"{ENV_PREFIX}VERIFY_BEFORE_SUBMIT"):
            overrides.setdefault("distributor", {})["verify_before_submit"] = (
                os.getenv(f"{ENV_PREFIX}VERIFY_BEFORE_SUBMIT", "true").lower() == "true"
            )
        if os.getenv(f"{ENV_PREFIX}TOKEN_DECIMALS"):
            overrides.setdefault("distributor", {})["token_decimals"] = int(
                os.getenv(f"{ENV_PREFIX}TOKEN_DECIMALS", "9")
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        if os.getenv(f"{ENV_PREFIX}API_HOST"):
            overrides.setdefault("api", {})["host"] = os.getenv(f"{ENV_PREFIX}API_HOST")
        if os.getenv(f"{ENV_PREFIX}API_PORT"):
            overrides.setdefault("api", {})["port"] = int(os.getenv(f"{ENV_PREFIX}API_PORT", "8000"))

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        distributor_data = data.get("distributor", {})
        logging_data = data.get("logging", {})
        api_data = data.get("api", {})

        # Flat "log_level" key, as written by `distributor config --init`
        if "log_level" in data and "level" not in logging_data:
            logging_data = {**logging_data, "level": data["log_level"]}

        return cls(
            distributor=DistributorConfig(**distributor_data) if distributor_data else DistributorConfig(),
            logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
            api=ApiConfig(**api_data) if api_data else ApiConfig(),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("distributor", "logging", "api"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "distributor": {
                "program_id": self.distributor.program_id,
                "default_capacity": self.distributor.default_capacity,
                "verify_before_submit": self.distributor.verify_before_submit,
                "token_decimals": self.distributor.token_decimals,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
            },
            "extra": self.extra,
        }


def load_runtime_config(path: str | Path | None = None) -> RuntimeConfig:
    """
    Load RuntimeConfig from a config file, then overlay environment variables.

    Search order when no path is given:
      1. ./distributor.json
      2. ./.distributor.json
      3. ~/.config/distributor/config.json

    ``.yaml``/``.yml`` files are read with PyYAML, everything else as JSON.
    Environment variables ALWAYS override config file values.
    """
    import json

    if path is not None:
        candidates = [Path(path)]
        if not candidates[0].exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        candidates = [
            Path.cwd() / "distributor.json",
            Path.cwd() / ".distributor.json",
            Path.home() / ".config" / "distributor" / "config.json",
        ]

    config: RuntimeConfig | None = None
    for candidate in candidates:
        if not candidate.exists():
            continue
        if candidate.suffix in (".yaml", ".yml"):
            config = RuntimeConfig.from_yaml(candidate)
        else:
            with open(candidate) as f:
                config = RuntimeConfig.from_dict(json.load(f))
        break

    if config is None:
        config = RuntimeConfig()

    return config.with_env_overrides()


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
