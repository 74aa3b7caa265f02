"""Google OAuth service package"""

from auth_api.services.google.google_config import GoogleOAuthSettings
from auth_api.services.google.google_oauth_client import (
    GoogleAuthResponse,
    GoogleOAuthClient,
    GoogleUser,
    get_google_client,
    google_oauth_client,
)

__all__ = [
    "GoogleAuthResponse",
    "GoogleOAuthClient",
    "GoogleOAuthSettings",
    "GoogleUser",
    "get_google_client",
    "google_oauth_client",
]
