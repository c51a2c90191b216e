"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health, tree, distributors, instructions
from api.errors import APIError, api_error_handler, distributor_error_handler, generic_error_handler
from core.schemas.errors import DistributorException


def _resolve_log_level() -> int:
    """Resolve log level from DISTRIBUTOR_LOG_LEVEL, defaulting to INFO."""
    raw = os.getenv("DISTRIBUTOR_LOG_LEVEL")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Merkle Distributor API",
        description="""
HTTP API for the Merkle-proof token distributor.

## Endpoints

- **POST /tree** - Build root and proofs for an ordered recipient list
- **POST /proof/verify** - Check a proof against a root
- **POST /distributors** - Initialize a distributor
- **GET /distributors/{address}** - Distributor record and claimed set
- **POST /distributors/{address}/claim** - Claim an entry exactly once
- **POST /instructions/initialize**, **POST /instructions/claim** - Unsigned instructions
- **GET /health** - Health check

## Errors

Protocol errors keep their codes: `INVALID_MERKLE_ROOT`, `ALREADY_CLAIMED`,
`INDEX_OUT_OF_RANGE`, `INSUFFICIENT_VAULT_BALANCE`, `MALFORMED_INPUT`.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(DistributorException, distributor_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(tree.router)
    app.include_router(distributors.router)
    app.include_router(instructions.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    from api.deps import get_config

    config = get_config()
    uvicorn.run(app, host=config.api.host, port=config.api.port)
