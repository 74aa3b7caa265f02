"""Result values returned by the auth flows."""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from auth_api.utils.errors import ErrorKind
from auth_api.utils.response_utils import error_response, success_response


@dataclass
class AuthResult:
    """Outcome of an auth flow.

    Expected failures (bad credentials, expired tokens, conflicts) are
    returned as values; only unexpected errors are raised.
    """

    success: bool
    message: str
    data: Optional[dict[str, Any]] = None
    error: Optional[ErrorKind] = None
    errors: Optional[list[str]] = None
    status_code: int = status.HTTP_200_OK

    @classmethod
    def ok(
        cls,
        message: str,
        data: Optional[dict[str, Any]] = None,
        status_code: int = status.HTTP_200_OK,
    ) -> "AuthResult":
        return cls(success=True, message=message, data=data, status_code=status_code)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: str,
        errors: Optional[list[str]] = None,
    ) -> "AuthResult":
        return cls(
            success=False,
            message=message,
            error=kind,
            errors=errors,
            status_code=kind.status_code,
        )

    def to_response(self, headers: Optional[dict[str, str]] = None) -> JSONResponse:
        if self.success:
            return success_response(self.data, self.message, self.status_code, headers=headers)
        return error_response(
            self.message,
            status_code=self.status_code,
            errors=self.errors,
            data=self.data,
            headers=headers,
        )
