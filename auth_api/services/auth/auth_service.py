"""Authentication flows: signup, signin, Google, refresh, logout,
email verification, password reset and password change."""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.models.user import User
from auth_api.models.user_profile import UserProfile
from auth_api.schemas.auth import (
    ChangePasswordRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
)
from auth_api.schemas.user import ProfileResponse, UserResponse
from auth_api.services.accounts import AccountStore, DuplicateEmailError, account_store, normalize_email
from auth_api.services.auth.auth_config import AuthSettings, auth_settings
from auth_api.services.auth.results import AuthResult
from auth_api.services.email import EmailResult, EmailService
from auth_api.services.google import GoogleOAuthClient
from auth_api.services.password import PasswordHasher, password_hasher
from auth_api.services.tokens import TokenInvalid, TokenService, token_service
from auth_api.utils.datetime_utils import utcnow
from auth_api.utils.errors import ErrorKind
from auth_api.utils.sentry_utils import capture_exception

logger = logging.getLogger(__name__)

PASSWORDS_DONT_MATCH = "Passwords don't match"
INVALID_CREDENTIALS = "Invalid credentials"


def hash_opaque_token(raw_token: str) -> str:
    """Digest stored in place of a mailed token"""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def split_display_name(name: Optional[str]) -> tuple[str, str]:
    """First word becomes the first name, the rest the last name."""
    parts = (name or "").split()
    first_name = parts[0] if parts else "Google"
    last_name = " ".join(parts[1:]) if len(parts) > 1 else "User"
    return first_name, last_name


class AuthService:
    """Orchestrates the auth flows for one request.

    Every public method returns an AuthResult and commits its own
    transaction on success. Emails are dispatched after the response.
    """

    def __init__(
        self,
        db: AsyncSession,
        mailer: EmailService,
        oauth_client: GoogleOAuthClient,
        background_tasks: BackgroundTasks,
        hasher: PasswordHasher = password_hasher,
        tokens: TokenService = token_service,
        store: AccountStore = account_store,
        settings: AuthSettings = auth_settings,
    ):
        self.db = db
        self.mailer = mailer
        self.oauth_client = oauth_client
        self.background_tasks = background_tasks
        self.hasher = hasher
        self.tokens = tokens
        self.store = store
        self.settings = settings

    # Helpers

    @staticmethod
    def serialize_user(user: User) -> dict:
        return UserResponse.model_validate(user).to_wire()

    @staticmethod
    def serialize_profile(profile: Optional[UserProfile]) -> Optional[dict]:
        if profile is None:
            return None
        return ProfileResponse.model_validate(profile).to_wire()

    async def _session_payload(self, user: User, profile: Optional[UserProfile] = None) -> dict:
        """user + profile + a fresh token pair"""
        if profile is None:
            profile = await self.store.get_profile(user.id, self.db)
        pair = await self.tokens.issue_token_pair(user.id, self.db)
        return {
            "user": self.serialize_user(user),
            "profile": self.serialize_profile(profile),
            **pair.to_dict(),
        }

    async def _create_verification_token(self, user: User) -> str:
        raw_token = secrets.token_urlsafe(32)
        expires_at = utcnow() + timedelta(hours=self.settings.VERIFICATION_TOKEN_TTL_HOURS)
        await self.store.insert_verification_token(user.id, hash_opaque_token(raw_token), expires_at, self.db)
        return raw_token

    async def _create_reset_token(self, user: User) -> str:
        raw_token = secrets.token_urlsafe(32)
        expires_at = utcnow() + timedelta(hours=self.settings.RESET_TOKEN_TTL_HOURS)
        await self.store.insert_reset_token(user.id, hash_opaque_token(raw_token), expires_at, self.db)
        return raw_token

    def _send_later(self, send: Callable[[str, str], Awaitable[EmailResult]], to_email: str, token: str) -> None:
        self.background_tasks.add_task(_dispatch_email, send, to_email, token)

    # Flows

    async def signup(self, data: SignupRequest) -> AuthResult:
        if data.password != data.confirm_password:
            return AuthResult.fail(ErrorKind.VALIDATION, PASSWORDS_DONT_MATCH, errors=[PASSWORDS_DONT_MATCH])

        if await self.store.find_active_user_by_email(data.email, self.db):
            return AuthResult.fail(ErrorKind.CONFLICT, "Email already exists")

        password_hash = await self.hasher.hash_async(data.password)
        try:
            user = await self.store.insert_user(data.email, self.db, password_hash=password_hash)
        except DuplicateEmailError:
            # Lost a race with a concurrent signup for the same email
            return AuthResult.fail(ErrorKind.CONFLICT, "Email already exists")

        profile = await self.store.insert_profile(
            user.id,
            self.db,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
        )
        verification_token = await self._create_verification_token(user)
        payload = await self._session_payload(user, profile)
        await self.db.commit()

        self._send_later(self.mailer.send_verification_email, user.email, verification_token)
        logger.info(f"User signed up: {user.id}")
        return AuthResult.ok("User created successfully", payload, status_code=201)

    async def signin(self, data: SigninRequest) -> AuthResult:
        user = await self.store.find_active_user_by_email(data.email, self.db)

        if user is None:
            await self.hasher.dummy_verify_async(data.password)
            return AuthResult.fail(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)

        if not user.password_hash:
            # OAuth-only account
            await self.hasher.dummy_verify_async(data.password)
            return AuthResult.fail(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)

        if not await self.hasher.verify_async(data.password, user.password_hash):
            return AuthResult.fail(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)

        if not user.email_verified:
            return AuthResult.fail(ErrorKind.EMAIL_NOT_VERIFIED, "Please verify your email address")

        payload = await self._session_payload(user)
        await self.db.commit()
        logger.info(f"User signed in: {user.id}")
        return AuthResult.ok("Login successful", payload)

    async def google_auth(self, code: str) -> AuthResult:
        response = await self.oauth_client.exchange_code(code)
        if not response.success or response.user is None:
            logger.warning(f"Google authentication failed: {response.error}")
            return AuthResult.fail(ErrorKind.INVALID_CREDENTIALS, "Google authentication failed")

        google_user = response.user
        first_name, last_name = split_display_name(google_user.name)

        try:
            user = await self.store.find_active_user_by_email_or_provider_id(
                google_user.email, google_user.id, self.db
            )
        except DuplicateEmailError:
            logger.warning(f"Google id {google_user.id} and email {google_user.email} belong to different users")
            return AuthResult.fail(ErrorKind.CONFLICT, "Email already exists")

        linked = user is not None and user.google_id == google_user.id
        if not linked and not google_user.email_verified:
            # Only a verified Google email may link or create an account
            logger.warning(f"Google email not verified for google id {google_user.id}")
            return AuthResult.fail(ErrorKind.INVALID_CREDENTIALS, "Google authentication failed")

        if user is not None:
            if not linked and user.google_id:
                return AuthResult.fail(ErrorKind.CONFLICT, "Account is linked to another Google account")

            email_confirmed = google_user.email_verified and user.email == normalize_email(google_user.email)
            try:
                await self.store.update_user(
                    user,
                    self.db,
                    google_id=google_user.id,
                    email_verified=user.email_verified or email_confirmed,
                )
            except DuplicateEmailError:
                return AuthResult.fail(ErrorKind.CONFLICT, "Email already exists")
            profile = await self.store.get_profile(user.id, self.db)
            if profile is None:
                profile = await self.store.insert_profile(
                    user.id, self.db, first_name=first_name, last_name=last_name
                )
            else:
                await self.store.update_profile(profile, self.db, first_name=first_name, last_name=last_name)
        else:
            try:
                user = await self.store.insert_user(
                    google_user.email,
                    self.db,
                    email_verified=True,
                    is_oauth_user=True,
                    google_id=google_user.id,
                )
            except DuplicateEmailError:
                return AuthResult.fail(ErrorKind.CONFLICT, "Email already exists")
            profile = await self.store.insert_profile(
                user.id,
                self.db,
                first_name=first_name,
                last_name=last_name,
                avatar_url=google_user.picture,
            )

        payload = await self._session_payload(user, profile)
        await self.db.commit()
        logger.info(f"Google sign-in for user {user.id}")
        return AuthResult.ok("Google authentication successful", payload)

    async def refresh(self, refresh_token: str) -> AuthResult:
        try:
            payload = await self.tokens.verify_refresh_token(refresh_token, self.db)
        except TokenInvalid:
            return AuthResult.fail(ErrorKind.TOKEN_INVALID, "Invalid refresh token")

        user = await self.store.find_active_user_by_id(payload.user_id, self.db)
        if user is None:
            return AuthResult.fail(ErrorKind.TOKEN_INVALID, "Invalid refresh token")

        renewed = await self.tokens.renew(payload, self.db)
        await self.db.commit()
        return AuthResult.ok("Token refreshed successfully", renewed.to_dict())

    async def logout(self, refresh_token: Optional[str]) -> AuthResult:
        if refresh_token and await self.tokens.revoke(refresh_token, self.db):
            await self.db.commit()
        return AuthResult.ok("Logout successful")

    async def send_verification_email(self, email: str) -> AuthResult:
        """Same response whether or not the account exists or is verified."""
        user = await self.store.find_active_user_by_email(email, self.db)
        if user is not None and not user.email_verified:
            verification_token = await self._create_verification_token(user)
            await self.db.commit()
            self._send_later(self.mailer.send_verification_email, user.email, verification_token)
        return AuthResult.ok("Verification email sent successfully")

    async def verify_email(self, token: str) -> AuthResult:
        record = await self.store.find_verification_token(hash_opaque_token(token), self.db)
        if record is None:
            return AuthResult.fail(ErrorKind.TOKEN_INVALID, "Invalid verification token")

        if utcnow() > record.expires_at:
            return AuthResult.fail(ErrorKind.TOKEN_EXPIRED, "Verification token expired")

        user = await self.store.find_active_user_by_id(record.user_id, self.db)
        if user is None:
            return AuthResult.fail(ErrorKind.TOKEN_INVALID, "Invalid verification token")

        await self.store.update_user(user, self.db, email_verified=True)
        await self.store.delete_verification_token(record, self.db)
        await self.db.commit()
        logger.info(f"Email verified for user {user.id}")
        return AuthResult.ok("Email verified successfully")

    async def forgot_password(self, email: str) -> AuthResult:
        user = await self.store.find_active_user_by_email(email, self.db)
        if user is not None:
            reset_token = await self._create_reset_token(user)
            await self.db.commit()
            self._send_later(self.mailer.send_password_reset_email, user.email, reset_token)
        return AuthResult.ok("Password reset email sent successfully")

    async def reset_password(self, data: ResetPasswordRequest) -> AuthResult:
        if data.new_password != data.confirm_password:
            return AuthResult.fail(ErrorKind.VALIDATION, PASSWORDS_DONT_MATCH, errors=[PASSWORDS_DONT_MATCH])

        record = await self.store.find_reset_token(hash_opaque_token(data.token), self.db)
        if record is None:
            return AuthResult.fail(ErrorKind.TOKEN_INVALID, "Invalid reset token")

        if utcnow() > record.expires_at:
            return AuthResult.fail(ErrorKind.TOKEN_EXPIRED, "Reset token expired")

        user = await self.store.find_active_user_by_id(record.user_id, self.db)
        if user is None:
            return AuthResult.fail(ErrorKind.TOKEN_INVALID, "Invalid reset token")

        password_hash = await self.hasher.hash_async(data.new_password)
        await self.store.update_user(user, self.db, password_hash=password_hash)
        await self.store.delete_reset_token(record, self.db)
        await self.tokens.revoke_all(user.id, self.db)
        await self.db.commit()
        logger.info(f"Password reset for user {user.id}")
        return AuthResult.ok("Password reset successfully")

    async def change_password(self, user: User, data: ChangePasswordRequest) -> AuthResult:
        if not user.password_hash or not await self.hasher.verify_async(data.current_password, user.password_hash):
            return AuthResult.fail(ErrorKind.VALIDATION, "Invalid current password")

        if data.new_password != data.confirm_password:
            return AuthResult.fail(ErrorKind.VALIDATION, PASSWORDS_DONT_MATCH, errors=[PASSWORDS_DONT_MATCH])

        password_hash = await self.hasher.hash_async(data.new_password)
        await self.store.update_user(user, self.db, password_hash=password_hash)
        await self.tokens.revoke_all(user.id, self.db)
        await self.db.commit()
        logger.info(f"Password changed for user {user.id}")
        return AuthResult.ok("Password changed successfully")


async def _dispatch_email(
    send: Callable[[str, str], Awaitable[EmailResult]],
    to_email: str,
    token: str,
) -> None:
    """Background task; a failed send is logged and never reaches the client."""
    try:
        result = await send(to_email, token)
    except Exception as e:
        logger.error(f"Email dispatch to {to_email} raised: {e}", exc_info=True)
        capture_exception(e)
        return

    if not result.success:
        logger.warning(f"Email dispatch to {to_email} failed: {result.error}")
