"""FastAPI dependencies for authenticated routes and the auth service."""

from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.db import get_db
from auth_api.models.user import User
from auth_api.services.accounts import account_store
from auth_api.services.auth.auth_service import AuthService
from auth_api.services.email import EmailService, get_mailer
from auth_api.services.google import GoogleOAuthClient, get_google_client
from auth_api.services.tokens import ACCESS, TokenInvalid, token_service
from auth_api.utils.errors import ApiError, ErrorKind
from auth_api.utils.sentry_utils import set_user_context

UNAUTHORIZED = "Unauthorized"


def get_token_from_header(request: Request) -> str:
    """
    Extract Bearer token from Authorization header.

    Raises:
        ApiError: If the header is missing or not a Bearer token
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        raise ApiError(ErrorKind.TOKEN_INVALID, UNAUTHORIZED, errors=["Authorization header missing"])

    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise ApiError(
            ErrorKind.TOKEN_INVALID,
            UNAUTHORIZED,
            errors=["Invalid authorization header format. Expected 'Bearer <token>'"],
        )

    return token.strip()


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    """
    FastAPI dependency resolving the active user behind an access token.

    Raises:
        ApiError: 401 if the token is missing, invalid or expired, or the
            user no longer exists
    """
    token = get_token_from_header(request)

    try:
        payload = token_service.verify(token, ACCESS)
    except TokenInvalid:
        raise ApiError(ErrorKind.TOKEN_INVALID, UNAUTHORIZED) from None

    user = await account_store.find_active_user_by_id(payload.user_id, db)
    if user is None:
        raise ApiError(ErrorKind.TOKEN_INVALID, UNAUTHORIZED)

    request.state.user_id = str(user.id)
    set_user_context(str(user.id))
    return user


def get_auth_service(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    mailer: EmailService = Depends(get_mailer),
    oauth_client: GoogleOAuthClient = Depends(get_google_client),
) -> AuthService:
    return AuthService(db, mailer, oauth_client, background_tasks)
