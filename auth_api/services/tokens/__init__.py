"""Token service package."""

from auth_api.services.tokens.token_config import TokenSettings, token_settings
from auth_api.services.tokens.token_service import (
    ACCESS,
    REFRESH,
    IssuedToken,
    RefreshedTokens,
    TokenInvalid,
    TokenPair,
    TokenPayload,
    TokenService,
    token_service,
)

__all__ = [
    "ACCESS",
    "REFRESH",
    "IssuedToken",
    "RefreshedTokens",
    "TokenInvalid",
    "TokenPair",
    "TokenPayload",
    "TokenService",
    "TokenSettings",
    "token_service",
    "token_settings",
]
