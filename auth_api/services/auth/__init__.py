"""Authentication orchestration package."""

from auth_api.services.auth.auth_config import AuthSettings, auth_settings
from auth_api.services.auth.auth_service import AuthService, hash_opaque_token, split_display_name
from auth_api.services.auth.dependencies import get_auth_service, get_current_user
from auth_api.services.auth.results import AuthResult

__all__ = [
    "AuthResult",
    "AuthService",
    "AuthSettings",
    "auth_settings",
    "get_auth_service",
    "get_current_user",
    "hash_opaque_token",
    "split_display_name",
]
