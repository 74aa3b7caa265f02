"""Issued refresh tokens, tracked by JWT id for revocation"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from auth_api.db.database import Base
from auth_api.utils.datetime_utils import utcnow


class RefreshToken(Base):
    """One row per issued refresh token.

    A token is honoured only while its row exists with revoked_at unset.
    """

    __tablename__ = "refresh_tokens"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    jti = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    revoked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    def __repr__(self):
        return f"<RefreshToken(user_id={self.user_id}, jti={self.jti[:8]}..., revoked={self.is_revoked})>"
