"""Standardized response envelope: {success, message, data?, errors?}."""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse


def success(
    data: Any = None,
    message: str = "Success",
) -> dict:
    """Create a standardized success response body.

    Args:
        data: Response data payload
        message: Success message

    Returns:
        Dictionary with success response structure
    """
    response = {
        "success": True,
        "message": message,
    }
    if data is not None:
        response["data"] = data
    return response


def success_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Wrap a success body in a JSONResponse (for non-200 statuses)."""
    return JSONResponse(
        status_code=status_code,
        content=success(data, message),
        headers=headers,
    )


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: list[str] | None = None,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable error message
        status_code: HTTP status code
        errors: Field-level or detail messages
        data: Extra payload (e.g. debug stack outside production)
        headers: Extra response headers (e.g. Retry-After)

    Returns:
        JSONResponse with error envelope
    """
    content: dict[str, Any] = {
        "success": False,
        "message": message,
    }
    if data is not None:
        content["data"] = data
    if errors:
        content["errors"] = errors

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=headers,
    )


def validation_error(errors: list[str], message: str = "Validation failed") -> JSONResponse:
    """Create a 400 validation error response."""
    return error_response(
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        errors=errors,
    )


def rate_limited_error(message: str, retry_after: int, headers: dict[str, str] | None = None) -> JSONResponse:
    """Create a 429 response carrying the retry-after hint."""
    all_headers = {"Retry-After": str(retry_after)}
    if headers:
        all_headers.update(headers)
    return error_response(
        message=message,
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        errors=[f"Please wait {retry_after} seconds before trying again."],
        headers=all_headers,
    )


def internal_error(
    message: str = "An unexpected error occurred",
    stack: str | None = None,
) -> JSONResponse:
    """Create an internal server error response.

    The stack is only attached by callers outside production.
    """
    return error_response(
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        data={"stack": stack} if stack else None,
    )
