"""Error taxonomy shared by services, dependencies and exception handlers."""

from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    """Kinds of expected failures and the HTTP status each maps to."""

    VALIDATION = "VALIDATION_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL = "INTERNAL_ERROR"

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self]


ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.EMAIL_NOT_VERIFIED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.TOKEN_EXPIRED: status.HTTP_410_GONE,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(Exception):
    """Raised by request dependencies (bearer auth, rate limiting).

    Rendered as the standard error envelope by the handler registered in main.py.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        errors: list[str] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = errors
        self.headers = headers

    @property
    def status_code(self) -> int:
        return self.kind.status_code
