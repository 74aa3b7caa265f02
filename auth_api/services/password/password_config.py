"""Password hashing configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class PasswordSettings(BaseSettings):
    """bcrypt cost factor (log2 of the number of rounds)."""

    HASH_ROUNDS: int = Field(default=12, ge=4, le=31)

    class Config:
        env_prefix = "PASSWORD_"


password_settings = PasswordSettings()
