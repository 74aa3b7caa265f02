"""Authentication router"""

from fastapi import APIRouter, Depends, Request, status

from auth_api.middleware.rate_limit import RateLimit, enforce_rate_limit
from auth_api.models import User
from auth_api.schemas.auth import (
    ChangePasswordRequest,
    EmailRequest,
    GoogleAuthRequest,
    LogoutRequest,
    RefreshTokenRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
    VerifyEmailRequest,
)
from auth_api.services.auth import AuthService, get_auth_service, get_current_user
from auth_api.services.google import GoogleOAuthClient, get_google_client
from auth_api.services.rate_limit import AUTH, EMAIL_VERIFICATION, PASSWORD_RESET, STRICT
from auth_api.utils.response_utils import success

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit(AUTH))],
)
async def signup(data: SignupRequest, service: AuthService = Depends(get_auth_service)):
    """
    Register with email and password.

    Creates the user and profile, stores a verification token and mails it,
    and returns a token pair. The account cannot sign in until verified.
    """
    result = await service.signup(data)
    return result.to_response()


@router.post("/signin", dependencies=[Depends(RateLimit(AUTH))])
async def signin(data: SigninRequest, service: AuthService = Depends(get_auth_service)):
    """Sign in with email and password."""
    result = await service.signin(data)
    return result.to_response()


@router.get("/google/url")
async def google_authorization_url(
    state: str | None = None,
    client: GoogleOAuthClient = Depends(get_google_client),
):
    """URL of Google's consent screen for the authorization-code flow."""
    return success({"url": client.authorization_url(state)}, "Google authorization URL")


@router.post("/google", dependencies=[Depends(RateLimit(AUTH))])
async def google_auth(data: GoogleAuthRequest, service: AuthService = Depends(get_auth_service)):
    """Exchange a Google authorization code, creating or linking the account."""
    result = await service.google_auth(data.code)
    return result.to_response()


@router.post("/refresh")
async def refresh_token(data: RefreshTokenRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.refresh(data.refresh_token)
    return result.to_response()


@router.post("/logout")
async def logout(data: LogoutRequest | None = None, service: AuthService = Depends(get_auth_service)):
    """Revoke the supplied refresh token. Always succeeds."""
    result = await service.logout(data.refresh_token if data else None)
    return result.to_response()


@router.post("/send-verification-email")
async def send_verification_email(
    data: EmailRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Re-send the verification email. The response does not reveal whether the account exists."""
    await enforce_rate_limit(request, EMAIL_VERIFICATION, data.email)
    result = await service.send_verification_email(data.email)
    return result.to_response()


@router.post("/verify-email", dependencies=[Depends(RateLimit(AUTH))])
async def verify_email(data: VerifyEmailRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.verify_email(data.token)
    return result.to_response()


@router.post("/forgot-password")
async def forgot_password(
    data: EmailRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Mail a password reset link. Always reports success."""
    await enforce_rate_limit(request, PASSWORD_RESET, data.email)
    result = await service.forgot_password(data.email)
    return result.to_response()


@router.post("/reset-password", dependencies=[Depends(RateLimit(AUTH))])
async def reset_password(data: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    """Set a new password with a reset token; signs out every session."""
    result = await service.reset_password(data)
    return result.to_response()


@router.post("/change-password", dependencies=[Depends(RateLimit(STRICT))])
async def change_password(
    data: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    result = await service.change_password(user, data)
    return result.to_response()
