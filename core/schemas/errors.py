"""
Schemas
File: errors.py

Purpose: Error taxonomy for the distributor.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Every claim/initialize failure is terminal for that attempt; nothing here is
retried automatically. Each kind carries a distinct code so callers can tell
"wrong proof" apart from "already claimed" apart from "out of funds".
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Protocol errors
    INVALID_MERKLE_ROOT = "INVALID_MERKLE_ROOT"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    INSUFFICIENT_VAULT_BALANCE = "INSUFFICIENT_VAULT_BALANCE"
    MALFORMED_INPUT = "MALFORMED_INPUT"

    # Account errors
    MINT_MISMATCH = "MINT_MISMATCH"
    VAULT_AUTHORITY_MISMATCH = "VAULT_AUTHORITY_MISMATCH"
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    RECIPIENT_ACCOUNT_MISSING = "RECIPIENT_ACCOUNT_MISSING"


# Custom program error numbers, in the order the program declares them.
PROGRAM_ERROR_NUMBERS: dict[str, int] = {
    ErrorCodes.INVALID_MERKLE_ROOT: 6000,
    ErrorCodes.ALREADY_CLAIMED: 6001,
    ErrorCodes.INDEX_OUT_OF_RANGE: 6002,
    ErrorCodes.INSUFFICIENT_VAULT_BALANCE: 6003,
    ErrorCodes.MALFORMED_INPUT: 6004,
    ErrorCodes.MINT_MISMATCH: 6005,
    ErrorCodes.VAULT_AUTHORITY_MISMATCH: 6006,
}


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class DistributorError(BaseModel):
    """
    Base error model for structured error communication.

    Used for passing errors across the API/CLI boundary without exceptions.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ALREADY_CLAIMED],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class DistributorException(Exception):
    """
    Base exception for all distributor protocol errors.

    This exception carries structured error information and can be
    converted to a DistributorError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "DISTRIBUTOR_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    @property
    def program_error(self) -> int | None:
        """Custom program error number, if this kind has one."""
        return PROGRAM_ERROR_NUMBERS.get(self.code)

    def to_error_model(self) -> DistributorError:
        """Convert this exception to a DistributorError model."""
        return DistributorError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidMerkleRootException(DistributorException):
    """Proof does not fold to the stored root, or root malformed at init."""

    def __init__(
        self,
        message: str = "Invalid Merkle Root",
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_MERKLE_ROOT,
            details=full_details,
        )


class AlreadyClaimedException(DistributorException):
    """Claimed-bitmap bit for the index is already set."""

    def __init__(self, index: int, message: str | None = None) -> None:
        super().__init__(
            message=message or f"Already Claimed: index {index}",
            code=ErrorCodes.ALREADY_CLAIMED,
            details={"index": index},
        )
        self.index = index


class IndexOutOfRangeException(DistributorException):
    """Index exceeds the claimed-bitmap capacity."""

    def __init__(self, index: int, capacity: int) -> None:
        super().__init__(
            message=f"Index {index} out of range for bitmap capacity {capacity}",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            details={"index": index, "capacity": capacity},
        )


class InsufficientVaultBalanceException(DistributorException):
    """Transfer would exceed vault holdings."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            message=f"Insufficient vault balance: required {required}, available {available}",
            code=ErrorCodes.INSUFFICIENT_VAULT_BALANCE,
            details={"required": required, "available": available},
        )


class MalformedInputException(DistributorException):
    """Wrong-length hash, out-of-range integer, or non-canonical address."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_INPUT,
            details=full_details,
        )


class MintMismatchException(DistributorException):
    """A token account does not hold the distributor's mint."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            message=f"Mint mismatch: expected {expected}, got {actual}",
            code=ErrorCodes.MINT_MISMATCH,
            details={"expected": expected, "actual": actual},
        )


class VaultAuthorityMismatchException(DistributorException):
    """Vault is not owned by the authority derived from the root."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            message=f"Vault owner {actual} is not the derived authority {expected}",
            code=ErrorCodes.VAULT_AUTHORITY_MISMATCH,
            details={"expected": expected, "actual": actual},
        )


class AccountNotFoundException(DistributorException):
    """Referenced account does not exist on the ledger."""

    def __init__(self, address: str, kind: str = "account") -> None:
        super().__init__(
            message=f"{kind.capitalize()} not found: {address}",
            code=ErrorCodes.ACCOUNT_NOT_FOUND,
            details={"address": address, "kind": kind},
        )


class RecipientAccountMissingException(DistributorException):
    """The recipient's receiving token account has not been provisioned."""

    def __init__(self, recipient: str, token_account: str) -> None:
        super().__init__(
            message=(
                f"Receiving token account {token_account} for {recipient} "
                f"does not exist"
            ),
            code=ErrorCodes.RECIPIENT_ACCOUNT_MISSING,
            details={"recipient": recipient, "token_account": token_account},
        )
