"""Persistence operations for users, profiles and auth token records."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.models.email_verification_token import EmailVerificationToken
from auth_api.models.password_reset_token import PasswordResetToken
from auth_api.models.refresh_token import RefreshToken
from auth_api.models.user import User
from auth_api.models.user_profile import UserProfile
from auth_api.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)


class DuplicateEmailError(Exception):
    """An active user already owns the email (or provider id)."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountStore:
    """Data access for accounts.

    Writes are flushed, not committed; the calling flow owns the transaction.
    Soft-deleted users are invisible to every lookup except restore_user.
    """

    # Users

    async def find_active_user_by_email(self, email: str, db: AsyncSession) -> User | None:
        result = await db.execute(
            select(User).where(
                User.email == normalize_email(email),
                User.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def find_active_user_by_id(self, user_id: UUID, db: AsyncSession) -> User | None:
        result = await db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def find_active_user_by_provider_id(self, google_id: str, db: AsyncSession) -> User | None:
        result = await db.execute(
            select(User).where(User.google_id == google_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def find_active_user_by_email_or_provider_id(
        self,
        email: str,
        google_id: str,
        db: AsyncSession,
    ) -> User | None:
        """Match on either identifier.

        Raises:
            DuplicateEmailError: If the email and the provider id belong to
                two different active users
        """
        result = await db.execute(
            select(User).where(
                or_(User.email == normalize_email(email), User.google_id == google_id),
                User.deleted_at.is_(None),
            )
        )
        users = result.scalars().all()
        if len(users) > 1:
            raise DuplicateEmailError(f"Email {normalize_email(email)} and provider id {google_id} match different users")
        return users[0] if users else None

    async def insert_user(
        self,
        email: str,
        db: AsyncSession,
        password_hash: str | None = None,
        email_verified: bool = False,
        is_oauth_user: bool = False,
        google_id: str | None = None,
    ) -> User:
        """Insert a user.

        Raises:
            DuplicateEmailError: If the unique index on active emails rejects the row
        """
        user = User(
            email=normalize_email(email),
            password_hash=password_hash,
            email_verified=email_verified,
            is_oauth_user=is_oauth_user,
            google_id=google_id,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateEmailError(f"Email already registered: {user.email}") from e
        return user

    async def update_user(self, user: User, db: AsyncSession, **fields) -> User:
        """Set fields on a user.

        Raises:
            DuplicateEmailError: If a changed email or provider id is taken
        """
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = utcnow()
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateEmailError(f"Email or provider id already registered for user {user.id}") from e
        return user

    async def soft_delete_user(self, user: User, db: AsyncSession) -> User:
        user.deleted_at = utcnow()
        await db.flush()
        logger.info(f"Soft-deleted user {user.id}")
        return user

    async def restore_user(self, user_id: UUID, db: AsyncSession) -> User | None:
        """Clear deleted_at on a soft-deleted user.

        Returns None if there is no such deleted user.

        Raises:
            DuplicateEmailError: If an active user took the email meanwhile
        """
        result = await db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_not(None))
        )
        user = result.scalar_one_or_none()
        if user is None:
            return None

        if await self.find_active_user_by_email(user.email, db):
            raise DuplicateEmailError(f"Email already registered: {user.email}")

        user.deleted_at = None
        await db.flush()
        logger.info(f"Restored user {user.id}")
        return user

    # Profiles

    async def get_profile(self, user_id: UUID, db: AsyncSession) -> UserProfile | None:
        result = await db.execute(select(UserProfile).where(UserProfile.user_id == user_id))
        return result.scalar_one_or_none()

    async def insert_profile(self, user_id: UUID, db: AsyncSession, **fields) -> UserProfile:
        profile = UserProfile(user_id=user_id, **fields)
        db.add(profile)
        await db.flush()
        return profile

    async def update_profile(self, profile: UserProfile, db: AsyncSession, **fields) -> UserProfile:
        for name, value in fields.items():
            setattr(profile, name, value)
        profile.updated_at = utcnow()
        await db.flush()
        return profile

    # Email verification tokens

    async def insert_verification_token(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        db: AsyncSession,
    ) -> EmailVerificationToken:
        record = EmailVerificationToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        db.add(record)
        await db.flush()
        return record

    async def find_verification_token(self, token_hash: str, db: AsyncSession) -> EmailVerificationToken | None:
        result = await db.execute(
            select(EmailVerificationToken).where(EmailVerificationToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def delete_verification_token(self, record: EmailVerificationToken, db: AsyncSession) -> None:
        await db.delete(record)
        await db.flush()

    # Password reset tokens

    async def insert_reset_token(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        db: AsyncSession,
    ) -> PasswordResetToken:
        record = PasswordResetToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        db.add(record)
        await db.flush()
        return record

    async def find_reset_token(self, token_hash: str, db: AsyncSession) -> PasswordResetToken | None:
        result = await db.execute(
            select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def delete_reset_token(self, record: PasswordResetToken, db: AsyncSession) -> None:
        await db.delete(record)
        await db.flush()

    # Refresh tokens

    async def insert_refresh_token(
        self,
        user_id: UUID,
        jti: str,
        expires_at: datetime,
        db: AsyncSession,
    ) -> RefreshToken:
        record = RefreshToken(user_id=user_id, jti=jti, expires_at=expires_at)
        db.add(record)
        await db.flush()
        return record

    async def find_refresh_token(self, jti: str, db: AsyncSession) -> RefreshToken | None:
        result = await db.execute(select(RefreshToken).where(RefreshToken.jti == jti))
        return result.scalar_one_or_none()

    async def revoke_refresh_token(self, jti: str, db: AsyncSession) -> bool:
        """Mark one refresh token revoked. Returns False if unknown or already revoked."""
        result = await db.execute(
            update(RefreshToken)
            .where(RefreshToken.jti == jti, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=utcnow())
        )
        return result.rowcount > 0

    async def revoke_all_refresh_tokens(self, user_id: UUID, db: AsyncSession) -> int:
        result = await db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=utcnow())
        )
        return result.rowcount

    # Maintenance

    async def purge_expired_tokens(self, db: AsyncSession, now: datetime | None = None) -> int:
        """Delete expired verification, reset and refresh token rows.

        Returns the total number of rows removed.
        """
        now = now or utcnow()
        removed = 0
        for model in (EmailVerificationToken, PasswordResetToken, RefreshToken):
            result = await db.execute(delete(model).where(model.expires_at < now))
            removed += result.rowcount
        return removed


account_store = AccountStore()
