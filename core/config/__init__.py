"""
Runtime Configuration Module

Provides configuration loading and management for the distributor.
"""

from .runtime import (
    ApiConfig,
    DistributorConfig,
    LoggingConfig,
    RuntimeConfig,
    get_default_config,
    load_runtime_config,
    set_default_config,
)

__all__ = [
    "ApiConfig",
    "DistributorConfig",
    "LoggingConfig",
    "RuntimeConfig",
    "get_default_config",
    "load_runtime_config",
    "set_default_config",
]
