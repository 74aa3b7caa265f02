"""Google OAuth client: authorization URL, code exchange and userinfo"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from auth_api.services.google.google_config import GoogleOAuthSettings
from auth_api.utils import logger


@dataclass
class GoogleUser:
    """Identity returned by Google's userinfo endpoint"""

    id: str
    email: str
    name: str = ""
    picture: Optional[str] = None
    email_verified: bool = False


@dataclass
class GoogleAuthResponse:
    """Response from the code exchange"""

    success: bool
    user: Optional[GoogleUser] = None
    error: Optional[str] = None


class GoogleOAuthClient:
    """Exchange an authorization code for the Google user's identity"""

    def __init__(self, settings: Optional[GoogleOAuthSettings] = None):
        self._settings = settings

    @property
    def settings(self) -> GoogleOAuthSettings:
        if self._settings is None:
            self._settings = GoogleOAuthSettings()
        return self._settings

    def is_configured(self) -> bool:
        return bool(self.settings.CLIENT_ID and self.settings.CLIENT_SECRET)

    def authorization_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.settings.CLIENT_ID,
            "redirect_uri": self.settings.REDIRECT_URI,
            "response_type": "code",
            "scope": self.settings.SCOPES,
            "access_type": "offline",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{self.settings.AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> GoogleAuthResponse:
        """
        Exchange an authorization code and fetch the user's profile.

        Args:
            code: Authorization code from the Google redirect

        Returns:
            GoogleAuthResponse with the user on success
        """
        if not self.is_configured():
            logger.error("Google OAuth client not configured")
            return GoogleAuthResponse(success=False, error="Google OAuth not configured")

        try:
            async with httpx.AsyncClient(timeout=self.settings.TIMEOUT) as client:
                token_response = await client.post(
                    self.settings.TOKEN_URL,
                    data={
                        "client_id": self.settings.CLIENT_ID,
                        "client_secret": self.settings.CLIENT_SECRET,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self.settings.REDIRECT_URI,
                    },
                    headers={"Accept": "application/json"},
                )

                if token_response.status_code != 200:
                    error_msg = f"Google token exchange failed: {token_response.status_code}"
                    logger.warning(f"{error_msg} - {token_response.text[:200]}")
                    return GoogleAuthResponse(success=False, error=error_msg)

                access_token = token_response.json().get("access_token")
                if not access_token:
                    return GoogleAuthResponse(success=False, error="Google returned no access token")

                userinfo_response = await client.get(
                    self.settings.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )

                if userinfo_response.status_code != 200:
                    error_msg = f"Google userinfo failed: {userinfo_response.status_code}"
                    logger.warning(error_msg)
                    return GoogleAuthResponse(success=False, error=error_msg)

                info = userinfo_response.json()

        except httpx.TimeoutException:
            error_msg = "Google OAuth request timed out"
            logger.error(error_msg)
            return GoogleAuthResponse(success=False, error=error_msg)
        except (httpx.HTTPError, ValueError) as e:
            error_msg = f"Google OAuth request failed: {e}"
            logger.error(error_msg, exc_info=True)
            return GoogleAuthResponse(success=False, error=error_msg)

        if not info.get("sub") or not info.get("email"):
            return GoogleAuthResponse(success=False, error="Google profile missing id or email")

        return GoogleAuthResponse(
            success=True,
            user=GoogleUser(
                id=info["sub"],
                email=info["email"],
                name=info.get("name") or "",
                picture=info.get("picture"),
                email_verified=bool(info.get("email_verified", False)),
            ),
        )


google_oauth_client = GoogleOAuthClient()


def get_google_client() -> GoogleOAuthClient:
    """FastAPI dependency returning the shared Google client"""
    return google_oauth_client
