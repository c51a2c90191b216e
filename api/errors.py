"""
API Error Handling

Standardized error handling for the API. Protocol exceptions keep their
codes, so a client can tell a wrong proof apart from an already-claimed
index apart from an empty vault.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import DistributorException, ErrorCodes


# HTTP status per protocol error code
STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.INVALID_MERKLE_ROOT: 400,
    ErrorCodes.ALREADY_CLAIMED: 409,
    ErrorCodes.INSUFFICIENT_VAULT_BALANCE: 409,
    ErrorCodes.INDEX_OUT_OF_RANGE: 422,
    ErrorCodes.MALFORMED_INPUT: 422,
    ErrorCodes.MINT_MISMATCH: 422,
    ErrorCodes.VAULT_AUTHORITY_MISMATCH: 422,
    ErrorCodes.ACCOUNT_NOT_FOUND: 404,
    ErrorCodes.RECIPIENT_ACCOUNT_MISSING: 404,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


class InternalError(APIError):
    """Internal server error."""

    def __init__(self, message: str = "Internal server error", details: dict[str, Any] | None = None):
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
            details=details,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def distributor_error_handler(request: Request, exc: DistributorException) -> JSONResponse:
    """Handle protocol exceptions raised by core."""
    details = dict(exc.details)
    if exc.program_error is not None:
        details["program_error"] = exc.program_error
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(exc.code, 400),
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(code=exc.code, message=exc.message, details=details),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
