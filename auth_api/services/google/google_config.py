"""Google OAuth configuration"""

from pydantic_settings import BaseSettings


class GoogleOAuthSettings(BaseSettings):
    """Settings for the Google OAuth2 authorization-code flow"""

    CLIENT_ID: str = ""
    CLIENT_SECRET: str = ""
    # Must match the redirect URI registered for the OAuth client
    REDIRECT_URI: str = "http://localhost:3000/auth/google/callback"

    AUTH_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    USERINFO_URL: str = "https://www.googleapis.com/oauth2/v3/userinfo"
    SCOPES: str = "openid email profile"

    # Timeout for API requests (seconds)
    TIMEOUT: int = 10

    class Config:
        env_prefix = "GOOGLE_"
