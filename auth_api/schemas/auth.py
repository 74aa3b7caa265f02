"""Request schemas for the authentication endpoints"""

from pydantic import EmailStr, Field

from auth_api.schemas.common import CamelModel, StrongPassword


class SignupRequest(CamelModel):
    """Password mismatch is reported by the service, not here"""
    email: EmailStr
    password: StrongPassword
    confirm_password: str
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class SigninRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class GoogleAuthRequest(CamelModel):
    """Authorization code from Google's redirect"""
    code: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


class EmailRequest(CamelModel):
    """Body for send-verification-email and forgot-password"""
    email: EmailStr


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: StrongPassword
    confirm_password: str


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: StrongPassword
    confirm_password: str
