from auth_api.db.database import Base
from auth_api.models.user import User
from auth_api.models.user_profile import UserProfile
from auth_api.models.email_verification_token import EmailVerificationToken
from auth_api.models.password_reset_token import PasswordResetToken
from auth_api.models.refresh_token import RefreshToken

__all__ = [
    "Base",
    "User",
    "UserProfile",
    "EmailVerificationToken",
    "PasswordResetToken",
    "RefreshToken",
]
