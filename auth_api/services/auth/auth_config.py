"""Auth flow configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class AuthSettings(BaseSettings):
    """Lifetimes of the single-use tokens sent by email."""

    VERIFICATION_TOKEN_TTL_HOURS: int = Field(default=24, gt=0)
    RESET_TOKEN_TTL_HOURS: int = Field(default=1, gt=0)

    class Config:
        env_prefix = "AUTH_"


auth_settings = AuthSettings()
