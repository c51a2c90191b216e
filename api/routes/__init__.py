"""API route handlers."""

from api.routes import health, tree, distributors, instructions

__all__ = ["health", "tree", "distributors", "instructions"]
