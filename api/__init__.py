"""
Merkle Distributor HTTP API (FastAPI)

- POST /tree - Build the tree and proofs for a recipient list
- POST /proof/verify - Verify a proof against a root
- POST /distributors - Initialize a distributor
- GET /distributors/{address} - Inspect a distributor
- POST /distributors/{address}/claim - Claim an entry
- POST /instructions/initialize|claim - Unsigned instruction payloads
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
