"""
Test fixtures package for distributor tests.

Factory functions for recipient lists and initialized distributors:
- distributor_fixtures.py: recipients, funded distributors, claim helpers

Usage:
    from fixtures.distributor_fixtures import make_recipients, make_distributor

    def test_something():
        setup = make_distributor(make_recipients([100, 250]))
        setup.claim(0)
"""

from .distributor_fixtures import (
    DistributorSetup,
    make_recipients,
    make_distributor,
)

__all__ = [
    "DistributorSetup",
    "make_recipients",
    "make_distributor",
]
