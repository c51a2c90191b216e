"""
Schemas
File: __init__.py

Purpose: Export the error taxonomy shared by every distributor module.
"""

from .errors import (
    ErrorCodes,
    PROGRAM_ERROR_NUMBERS,
    DistributorError,
    DistributorException,
    InvalidMerkleRootException,
    AlreadyClaimedException,
    IndexOutOfRangeException,
    InsufficientVaultBalanceException,
    MalformedInputException,
    MintMismatchException,
    VaultAuthorityMismatchException,
    AccountNotFoundException,
    RecipientAccountMissingException,
)

__all__ = [
    "ErrorCodes",
    "PROGRAM_ERROR_NUMBERS",
    "DistributorError",
    "DistributorException",
    "InvalidMerkleRootException",
    "AlreadyClaimedException",
    "IndexOutOfRangeException",
    "InsufficientVaultBalanceException",
    "MalformedInputException",
    "MintMismatchException",
    "VaultAuthorityMismatchException",
    "AccountNotFoundException",
    "RecipientAccountMissingException",
]
