"""User and profile schemas"""

from datetime import date, datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from auth_api.schemas.common import CamelModel
from auth_api.utils.constants import MAX_BIO_LENGTH, MIN_NAME_LENGTH


class UserResponse(CamelModel):
    """Account view for its owner; never carries the password hash"""
    id: UUID
    email: EmailStr
    email_verified: bool
    is_oauth_user: bool
    created_at: datetime
    updated_at: datetime


class ProfileResponse(CamelModel):
    id: UUID
    user_id: UUID
    first_name: str | None
    last_name: str | None
    avatar_url: str | None
    bio: str | None
    phone: str | None
    date_of_birth: date | None
    gender: str | None
    address: str | None
    city: str | None
    state: str | None
    country: str | None
    postal_code: str | None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class PublicProfileResponse(CamelModel):
    first_name: str | None
    last_name: str | None
    avatar_url: str | None
    bio: str | None


class PublicUserResponse(CamelModel):
    """What anyone may see about an active user"""
    id: UUID
    created_at: datetime
    profile: PublicProfileResponse | None = None


class ProfileUpdate(CamelModel):
    """Partial profile update; only fields present in the body are written"""
    first_name: str | None = Field(default=None, min_length=MIN_NAME_LENGTH, max_length=100)
    last_name: str | None = Field(default=None, min_length=MIN_NAME_LENGTH, max_length=100)
    bio: str | None = Field(default=None, max_length=MAX_BIO_LENGTH)
    avatar_url: str | None = Field(default=None, max_length=1024)
    phone: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    country: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    is_public: bool | None = None

    @field_validator("avatar_url")
    @classmethod
    def check_avatar_url(cls, v: str | None) -> str | None:
        # Empty string clears the avatar
        if v is None or v == "":
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("Avatar URL must be a valid http(s) URL")
        return v
