"""Signed, expiring access and refresh tokens (JWT, HS256 by default)."""

import logging
import secrets
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from auth_api.services.accounts import account_store
from auth_api.services.tokens.token_config import token_settings

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
REQUIRED_CLAIMS = ["sub", "iat", "exp", "type", "jti"]


class TokenInvalid(Exception):
    """Token failed verification.

    Raised for bad signatures, wrong token class, expiry, malformed input and
    revoked refresh tokens alike, so callers cannot tell the cases apart.
    """

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.message = message


@dataclass
class TokenPayload:
    sub: str
    type: str
    jti: str
    iat: int
    exp: int

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


@dataclass
class IssuedToken:
    token: str
    jti: str
    expires_at: datetime  # naive UTC


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> dict:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


@dataclass
class RefreshedTokens:
    access_token: str
    refresh_token: Optional[str] = None  # set only when rotation is enabled

    def to_dict(self) -> dict:
        data = {"accessToken": self.access_token}
        if self.refresh_token:
            data["refreshToken"] = self.refresh_token
        return data


class TokenService:
    """Issue and verify tokens; track refresh tokens for revocation.

    `clock` returns the current time as epoch seconds and is injectable so
    expiry can be tested without sleeping.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        rotate_refresh_tokens: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self._ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}
        self.algorithm = algorithm
        self.rotate_refresh_tokens = rotate_refresh_tokens
        self._clock = clock

    def _issue(self, user_id: uuid.UUID | str, token_type: str) -> IssuedToken:
        now = int(self._clock())
        exp = now + int(self._ttls[token_type].total_seconds())
        jti = secrets.token_hex(16)
        claims = {
            "sub": str(user_id),
            "iat": now,
            "exp": exp,
            "type": token_type,
            "jti": jti,
        }
        token = jwt.encode(claims, self._secrets[token_type], algorithm=self.algorithm)
        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc).replace(tzinfo=None)
        return IssuedToken(token=token, jti=jti, expires_at=expires_at)

    def issue_access_token(self, user_id: uuid.UUID | str) -> str:
        return self._issue(user_id, ACCESS).token

    def issue_refresh_token(self, user_id: uuid.UUID | str) -> IssuedToken:
        return self._issue(user_id, REFRESH)

    def verify(self, token: str, token_type: str) -> TokenPayload:
        """Check signature, token class and expiry.

        Raises:
            TokenInvalid: On any failure
            ValueError: If token_type is not "access" or "refresh"
        """
        if token_type not in self._secrets:
            raise ValueError(f"Unknown token type: {token_type}")

        try:
            claims = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                # Expiry is checked against the injected clock below
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.PyJWTError as e:
            logger.debug(f"Token decode failed: {e}")
            raise TokenInvalid() from e

        if claims.get("type") != token_type:
            raise TokenInvalid()

        try:
            uuid.UUID(str(claims["sub"]))
            payload = TokenPayload(
                sub=str(claims["sub"]),
                type=claims["type"],
                jti=str(claims["jti"]),
                iat=int(claims["iat"]),
                exp=int(claims["exp"]),
            )
        except (TypeError, ValueError) as e:
            raise TokenInvalid() from e

        if self._clock() >= payload.exp:
            raise TokenInvalid()

        return payload

    async def issue_token_pair(self, user_id: uuid.UUID, db: AsyncSession) -> TokenPair:
        """Issue an access/refresh pair and record the refresh token id."""
        access_token = self.issue_access_token(user_id)
        refresh = self.issue_refresh_token(user_id)
        await account_store.insert_refresh_token(user_id, refresh.jti, refresh.expires_at, db)
        return TokenPair(access_token=access_token, refresh_token=refresh.token)

    async def verify_refresh_token(self, token: str, db: AsyncSession) -> TokenPayload:
        """Verify a refresh token and check it has not been revoked."""
        payload = self.verify(token, REFRESH)
        record = await account_store.find_refresh_token(payload.jti, db)
        if record is None or record.is_revoked or str(record.user_id) != payload.sub:
            raise TokenInvalid()
        return payload

    async def renew(self, payload: TokenPayload, db: AsyncSession) -> RefreshedTokens:
        """Mint a new access token for a verified refresh payload.

        With rotation enabled the presented refresh token is revoked and a
        replacement is issued.
        """
        access_token = self.issue_access_token(payload.sub)
        if not self.rotate_refresh_tokens:
            return RefreshedTokens(access_token=access_token)

        await account_store.revoke_refresh_token(payload.jti, db)
        refresh = self.issue_refresh_token(payload.sub)
        await account_store.insert_refresh_token(payload.user_id, refresh.jti, refresh.expires_at, db)
        return RefreshedTokens(access_token=access_token, refresh_token=refresh.token)

    async def refresh(self, refresh_token: str, db: AsyncSession) -> RefreshedTokens:
        payload = await self.verify_refresh_token(refresh_token, db)
        return await self.renew(payload, db)

    async def revoke(self, refresh_token: str, db: AsyncSession) -> bool:
        """Revoke a refresh token. Returns False for invalid or already revoked tokens."""
        try:
            payload = self.verify(refresh_token, REFRESH)
        except TokenInvalid:
            return False
        return await account_store.revoke_refresh_token(payload.jti, db)

    async def revoke_all(self, user_id: uuid.UUID, db: AsyncSession) -> int:
        count = await account_store.revoke_all_refresh_tokens(user_id, db)
        if count:
            logger.info(f"Revoked {count} refresh token(s) for user {user_id}")
        return count


token_service = TokenService(
    access_secret=token_settings.ACCESS_SECRET,
    refresh_secret=token_settings.REFRESH_SECRET,
    access_ttl=timedelta(minutes=token_settings.ACCESS_TOKEN_TTL_MINUTES),
    refresh_ttl=timedelta(days=token_settings.REFRESH_TOKEN_TTL_DAYS),
    algorithm=token_settings.ALGORITHM,
    rotate_refresh_tokens=token_settings.ROTATE_REFRESH_TOKENS,
)
