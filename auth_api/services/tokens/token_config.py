"""JWT configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class TokenSettings(BaseSettings):
    """Secrets and lifetimes for access and refresh tokens.

    The two secrets must differ so one token class can never verify as the other.
    """

    ACCESS_SECRET: str = Field(min_length=32)
    REFRESH_SECRET: str = Field(min_length=32)
    ACCESS_TOKEN_TTL_MINUTES: int = Field(default=15, gt=0)
    REFRESH_TOKEN_TTL_DAYS: int = Field(default=7, gt=0)
    ALGORITHM: str = "HS256"
    ROTATE_REFRESH_TOKENS: bool = False

    @model_validator(mode="after")
    def check_distinct_secrets(self):
        if self.ACCESS_SECRET == self.REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        return self

    class Config:
        env_prefix = "JWT_"


token_settings = TokenSettings()
