"""User model for password and Google authenticated accounts"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import relationship

from auth_api.db.database import Base
from auth_api.utils.datetime_utils import utcnow

ACTIVE_ONLY = text("deleted_at IS NULL")


class User(Base):
    """Identity record.

    Email and Google id are unique among non-deleted users only, so a
    soft-deleted account does not block re-registration.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(320), nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)  # null for OAuth-only accounts
    email_verified = Column(Boolean, default=False, nullable=False)
    is_oauth_user = Column(Boolean, default=False, nullable=False)
    google_id = Column(String(255), nullable=True, index=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=ACTIVE_ONLY,
            sqlite_where=ACTIVE_ONLY,
        ),
        Index(
            "uq_users_google_id_active",
            "google_id",
            unique=True,
            postgresql_where=ACTIVE_ONLY,
            sqlite_where=ACTIVE_ONLY,
        ),
    )

    # Relationships
    profile = relationship("UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    email_verification_tokens = relationship(
        "EmailVerificationToken", back_populates="user", cascade="all, delete-orphan"
    )
    password_reset_tokens = relationship(
        "PasswordResetToken", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
