"""Single-use email verification tokens"""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from auth_api.db.database import Base
from auth_api.utils.datetime_utils import utcnow


class EmailVerificationToken(Base):
    """Verification token sent by email; only its SHA-256 digest is stored"""

    __tablename__ = "email_verification_tokens"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="email_verification_tokens")

    def __repr__(self):
        return f"<EmailVerificationToken(user_id={self.user_id}, expires_at={self.expires_at})>"
