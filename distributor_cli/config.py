"""
CLI Configuration

Thin layer over the shared runtime configuration: the CLI reads the same
config files and DISTRIBUTOR_* environment variables as the API.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.config.runtime import RuntimeConfig, load_runtime_config


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    if config_path is not None and not config_path.exists():
        return RuntimeConfig().with_env_overrides()
    return load_runtime_config(config_path)


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n"
