"""Password hashing service package."""

from auth_api.services.password.password_config import PasswordSettings, password_settings
from auth_api.services.password.password_hasher import (
    HashingError,
    PasswordHasher,
    password_hasher,
)

__all__ = [
    "HashingError",
    "PasswordHasher",
    "PasswordSettings",
    "password_hasher",
    "password_settings",
]
