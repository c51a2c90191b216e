"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "merkle-distributor-api"
    version: str = "v1"


class ClaimEntry(BaseModel):
    """One entry of a built distribution, with its proof."""

    index: int
    recipient: str
    amount: int
    leaf: str
    proof: list[str] = Field(default_factory=list)


class TreeResponse(BaseModel):
    """Response for POST /tree."""

    ok: bool = True
    merkle_root: str = Field(..., description="Merkle root (hex)")
    authority: str = Field(..., description="Derived vault authority")
    bump: int
    program_id: str
    total_amount: int
    depth: int
    claims: list[ClaimEntry] = Field(default_factory=list)


class VerifyProofResponse(BaseModel):
    """Response for POST /proof/verify."""

    ok: bool = True
    valid: bool = Field(..., description="Whether the proof folds to the root")
    leaf: str


class DistributorResponse(BaseModel):
    """Distributor account view."""

    ok: bool = True
    address: str
    merkle_root: str
    vault: str
    vault_balance: int
    bump: int
    token_mint: str
    total_supply: int
    claimed_bitmap: str
    authority: str
    capacity: int
    claimed_indices: list[int] = Field(default_factory=list)
    status: str


class DistributorListResponse(BaseModel):
    """Response for GET /distributors."""

    ok: bool = True
    distributors: list[DistributorResponse] = Field(default_factory=list)


class ClaimResponse(BaseModel):
    """Response for POST /distributors/{address}/claim."""

    ok: bool = True
    index: int
    transferred: int
    already_claimed: bool = False
    token_account: str
    vault_balance: int


class AccountMetaModel(BaseModel):
    pubkey: str
    is_signer: bool
    is_writable: bool


class InstructionResponse(BaseModel):
    """Unsigned instruction handed to the signing collaborator."""

    ok: bool = True
    program_id: str
    accounts: list[AccountMetaModel] = Field(default_factory=list)
    data: str = Field(..., description="Instruction data (hex)")
    args: dict[str, Any] = Field(default_factory=dict)


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
