from auth_api.schemas.common import CamelModel, StrongPassword, password_rule_failures
from auth_api.schemas.auth import (
    SignupRequest,
    SigninRequest,
    GoogleAuthRequest,
    RefreshTokenRequest,
    LogoutRequest,
    EmailRequest,
    VerifyEmailRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
)
from auth_api.schemas.user import (
    UserResponse,
    ProfileResponse,
    PublicProfileResponse,
    PublicUserResponse,
    ProfileUpdate,
)

__all__ = [
    # Common
    "CamelModel",
    "StrongPassword",
    "password_rule_failures",
    # Auth
    "SignupRequest",
    "SigninRequest",
    "GoogleAuthRequest",
    "RefreshTokenRequest",
    "LogoutRequest",
    "EmailRequest",
    "VerifyEmailRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",
    # User
    "UserResponse",
    "ProfileResponse",
    "PublicProfileResponse",
    "PublicUserResponse",
    "ProfileUpdate",
]
