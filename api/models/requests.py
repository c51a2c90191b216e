"""
API Request Models

Pydantic models for API request validation.

Hashes are 0x-prefixed hex strings; addresses are base58 strings. Their
byte-level validation happens in the route handlers so that a bad value is
reported as MALFORMED_INPUT.
"""

from pydantic import BaseModel, Field


class RecipientItem(BaseModel):
    """One row of the recipient list."""

    address: str = Field(..., description="Recipient address (base58)")
    amount: int = Field(..., ge=0, description="Amount in base units")


class BuildTreeRequest(BaseModel):
    """Request body for POST /tree."""

    recipients: list[RecipientItem] = Field(
        ...,
        min_length=1,
        description="Ordered recipient list; index is the position",
    )
    program_id: str | None = Field(
        default=None,
        description="Program the vault authority is derived under",
    )


class VerifyProofRequest(BaseModel):
    """Request body for POST /proof/verify."""

    root: str = Field(..., description="Merkle root (hex)")
    proof: list[str] = Field(default_factory=list, description="Sibling hashes, leaf-to-root")
    leaf: str | None = Field(default=None, description="Leaf hash (hex)")
    index: int | None = Field(default=None, ge=0)
    recipient: str | None = Field(default=None)
    amount: int | None = Field(default=None, ge=0)


class InitializeRequest(BaseModel):
    """Request body for POST /distributors."""

    merkle_root: str = Field(..., description="Merkle root (hex)")
    total_supply: int = Field(..., ge=0)
    token_mint: str | None = Field(
        default=None,
        description="Mint to distribute; a fresh one is created when omitted",
    )
    fund_vault: bool = Field(
        default=True,
        description="Create and fund the vault with total_supply before initializing",
    )
    capacity: int | None = Field(
        default=None,
        ge=1,
        description="Claimable indices (default from config)",
    )


class ClaimRequest(BaseModel):
    """Request body for POST /distributors/{address}/claim."""

    index: int = Field(..., ge=0)
    amount: int = Field(..., ge=0)
    recipient: str = Field(..., description="Recipient address (base58)")
    proof: list[str] = Field(default_factory=list, description="Sibling hashes, leaf-to-root")
    create_token_account: bool = Field(
        default=True,
        description="Provision the recipient's receiving account if missing",
    )
    idempotent: bool = Field(
        default=False,
        description="Treat an already-applied claim as a no-op",
    )


class InitializeInstructionRequest(BaseModel):
    """Request body for POST /instructions/initialize."""

    merkle_root: str
    total_supply: int = Field(..., ge=0)
    distributor: str
    vault: str
    payer: str
    token_mint: str


class ClaimInstructionRequest(BaseModel):
    """Request body for POST /instructions/claim."""

    index: int = Field(..., ge=0)
    amount: int = Field(..., ge=0)
    proof: list[str] = Field(default_factory=list)
    distributor: str
    merkle_root: str
    vault: str
    recipient: str
    token_mint: str
    user_token_account: str | None = Field(
        default=None,
        description="Receiving account; the recipient's associated account when omitted",
    )
