"""
Pytest configuration and shared fixtures for distributor tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_distributor = importlib.import_module("fixtures.distributor_fixtures")

make_recipients = _distributor.make_recipients
make_distributor = _distributor.make_distributor


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def recipients():
    """Two-entry recipient list: A=100, B=250."""
    return make_recipients([100, 250])


@pytest.fixture
def two_entry_distributor(recipients):
    """Distributor over A=100, B=250 with a vault holding 350."""
    return make_distributor(recipients)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep DISTRIBUTOR_* variables from the caller's shell out of tests."""
    import os
    for key in list(os.environ):
        if key.startswith("DISTRIBUTOR_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
