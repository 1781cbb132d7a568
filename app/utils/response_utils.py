"""Standardized error responses."""

from fastapi import status
from fastapi.responses import JSONResponse

from app.utils.constants import ERROR_CODES


def error_response(
    code: str,
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: dict | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        code: Error code (e.g., 'VALIDATION_ERROR', 'NOT_FOUND')
        message: Human-readable error message
        status_code: HTTP status code
        details: Additional error details
        headers: Extra response headers

    Returns:
        JSONResponse with error structure
    """
    content = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
    )


def error_code_for_status(status_code: int) -> str:
    return ERROR_CODES.get(status_code, "ERROR")


def validation_error(
    message: str,
    field: str | None = None,
) -> JSONResponse:
    """Create a validation error response (400) naming the offending field."""
    return error_response(
        code="VALIDATION_ERROR",
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        details={"field": field} if field else None,
    )


def not_found_error(
    resource: str = "Resource",
    message: str | None = None,
) -> JSONResponse:
    """Create a not found error response."""
    return error_response(
        code="NOT_FOUND",
        message=message or f"{resource} not found",
        status_code=status.HTTP_404_NOT_FOUND,
    )


def unauthorized_error(
    message: str = "Authentication required",
) -> JSONResponse:
    """Create an unauthorized error response."""
    return error_response(
        code="UNAUTHORIZED",
        message=message,
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": "Bearer"},
    )


def internal_error(
    message: str = "An unexpected error occurred",
) -> JSONResponse:
    """Create an internal server error response.

    The message is fixed by default; failure details belong in the logs only.
    """
    return error_response(
        code="INTERNAL_ERROR",
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
