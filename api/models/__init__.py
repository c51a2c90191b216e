"""API request and response models."""

from api.models.requests import (
    RecipientItem,
    BuildTreeRequest,
    VerifyProofRequest,
    InitializeRequest,
    ClaimRequest,
    InitializeInstructionRequest,
    ClaimInstructionRequest,
)
from api.models.responses import (
    HealthResponse,
    ClaimEntry,
    TreeResponse,
    VerifyProofResponse,
    DistributorResponse,
    DistributorListResponse,
    ClaimResponse,
    AccountMetaModel,
    InstructionResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "RecipientItem",
    "BuildTreeRequest",
    "VerifyProofRequest",
    "InitializeRequest",
    "ClaimRequest",
    "InitializeInstructionRequest",
    "ClaimInstructionRequest",
    "HealthResponse",
    "ClaimEntry",
    "TreeResponse",
    "VerifyProofResponse",
    "DistributorResponse",
    "DistributorListResponse",
    "ClaimResponse",
    "AccountMetaModel",
    "InstructionResponse",
    "ErrorDetail",
    "ErrorResponse",
]
