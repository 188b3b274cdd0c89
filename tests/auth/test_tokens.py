"""Tests for access tokens and refresh credentials."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from wls.auth.tokens import JwtIssuer, TokenPayload

SECRET = "s" * 64


class TestAccessToken:
    def test_issue_and_decode(self):
        issuer = JwtIssuer(SECRET)
        token, expires_at = issuer.issue_access_token(TokenPayload(user_id=42, email="a@example.com"))
        payload = issuer.decode_access_token(token)
        assert payload == TokenPayload(user_id=42, email="a@example.com")
        assert expires_at > datetime.now(timezone.utc)

    def test_claims(self):
        issuer = JwtIssuer(SECRET, issuer="test-issuer")
        token, _ = issuer.issue_access_token(TokenPayload(user_id=7))
        claims = jwt.decode(token, SECRET, algorithms=["HS512"], issuer="test-issuer")
        assert claims["sub"] == "7"
        assert claims["type"] == "access"
        assert "email" not in claims

    def test_expired_token_rejected(self):
        issuer = JwtIssuer(SECRET, access_ttl=timedelta(seconds=-1))
        token, _ = issuer.issue_access_token(TokenPayload(user_id=1))
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            issuer.decode_access_token(token)

    def test_wrong_secret_rejected(self):
        token, _ = JwtIssuer(SECRET).issue_access_token(TokenPayload(user_id=1))
        with pytest.raises(jwt.InvalidTokenError):
            JwtIssuer("o" * 64).decode_access_token(token)

    def test_wrong_type_rejected(self):
        token = jwt.encode(
            {"sub": "1", "iss": "watchlist-server", "type": "refresh"},
            SECRET,
            algorithm="HS512",
        )
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            JwtIssuer(SECRET).decode_access_token(token)


class TestRefreshCredential:
    def test_credentials_are_random(self):
        issuer = JwtIssuer(SECRET)
        first, _ = issuer.issue_refresh_credential()
        second, _ = issuer.issue_refresh_credential()
        assert first != second
        assert len(first) >= 32

    def test_expiry_uses_refresh_ttl(self):
        issuer = JwtIssuer(SECRET, refresh_ttl=timedelta(days=30))
        _, expires_at = issuer.issue_refresh_credential()
        assert timedelta(days=29) < expires_at - datetime.now(timezone.utc) <= timedelta(days=30)
