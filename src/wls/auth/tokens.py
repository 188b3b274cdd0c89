"""
HMAC-signed JWT access tokens and opaque refresh credentials.

Access tokens carry the user's ID in ``sub`` plus ``type``/``iss``/``exp``
claims. Refresh credentials are random URL-safe strings; only their digest
is stored.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import jwt

from wls.config import Settings


@dataclass(frozen=True)
class TokenPayload:
    """Claims carried by an access token."""

    user_id: int
    email: str | None = None


class TokenIssuer(Protocol):
    def issue_access_token(self, payload: TokenPayload) -> tuple[str, datetime]: ...

    def issue_refresh_credential(self) -> tuple[str, datetime]: ...


class JwtIssuer:
    """Issues and verifies access tokens signed with a shared secret."""

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS512",
        issuer: str = "watchlist-server",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=30),
    ) -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtIssuer:
        return cls(
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            access_ttl=timedelta(minutes=settings.jwt_access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.jwt_refresh_token_expire_days),
        )

    def issue_access_token(self, payload: TokenPayload) -> tuple[str, datetime]:
        """
        Create a short-lived access token.

        Returns:
            Tuple of (encoded JWT, expiry time).
        """
        now = datetime.now(timezone.utc)
        expires_at = now + self.access_ttl
        claims: dict[str, Any] = {
            "sub": str(payload.user_id),
            "iat": now,
            "exp": expires_at,
            "iss": self.issuer,
            "type": "access",
        }
        if payload.email is not None:
            claims["email"] = payload.email
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm), expires_at

    def issue_refresh_credential(self) -> tuple[str, datetime]:
        """Create a random refresh credential and its expiry time."""
        return secrets.token_urlsafe(32), datetime.now(timezone.utc) + self.refresh_ttl

    def decode_access_token(self, token: str) -> TokenPayload:
        """
        Verify and decode an access token.

        Raises:
            jwt.InvalidTokenError: If the token is invalid, expired, or not an access token.
        """
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
            )
        except jwt.ExpiredSignatureError:
            msg = "Token has expired"
            raise jwt.InvalidTokenError(msg) from None

        if claims.get("type") != "access":
            msg = f"Expected token type 'access', got '{claims.get('type')}'"
            raise jwt.InvalidTokenError(msg)

        return TokenPayload(user_id=int(claims["sub"]), email=claims.get("email"))
