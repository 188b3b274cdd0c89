"""
Session business logic: login, logout and access-token refresh.

A login stores only the digest of the refresh credential it hands out.
Logout expires the stored token; refresh issues a new access token without
rotating the refresh credential.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from wls.auth.password import HashMismatchError
from wls.auth.tokens import TokenPayload
from wls.db.models import Token, utcnow
from wls.errors import IncorrectCredentialError, NotFoundError
from wls.repo.errors import NoRecordError
from wls.repo.patches import TokenPatch

if TYPE_CHECKING:
    from wls.auth.password import Hasher
    from wls.auth.tokens import TokenIssuer
    from wls.config import Settings
    from wls.repo import RepositoryTx
    from wls.users.schemas import LoginRequest

logger = structlog.get_logger()


@dataclass(frozen=True)
class RefreshResult:
    access_token: str
    access_expires_at: datetime


@dataclass(frozen=True)
class LoginResult(RefreshResult):
    user_id: int
    refresh_token: str
    refresh_expires_at: datetime


class AuthService:
    def __init__(self, repo: RepositoryTx, hasher: Hasher, issuer: TokenIssuer, settings: Settings) -> None:
        self.repo = repo
        self.hasher = hasher
        self.issuer = issuer
        self.settings = settings

    async def login(self, req: LoginRequest) -> LoginResult:
        """
        Verify email + password and open a session.

        Raises:
            NotFoundError: If no user has the email.
            IncorrectCredentialError: If the password does not match.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                user = await tx.user_get_by_email(req.email)
            except NoRecordError:
                msg = "user not found"
                raise NotFoundError(msg) from None

            try:
                self.hasher.compare(user.password_hash, req.password)
            except HashMismatchError:
                logger.info("login_failed", user_id=user.id, reason="wrong_password")
                msg = "incorrect password"
                raise IncorrectCredentialError(msg) from None

            access_token, access_expires_at = self.issuer.issue_access_token(
                TokenPayload(user_id=user.id, email=user.email)
            )
            refresh_token, refresh_expires_at = self.issuer.issue_refresh_credential()

            await tx.token_create(
                Token(
                    token_hash=self.hasher.hash(refresh_token),
                    user_id=user.id,
                    expires_at=refresh_expires_at,
                )
            )

        logger.info("user_logged_in", user_id=user.id)
        return LoginResult(
            access_token=access_token,
            access_expires_at=access_expires_at,
            user_id=user.id,
            refresh_token=refresh_token,
            refresh_expires_at=refresh_expires_at,
        )

    async def logout(self, user_id: int, refresh_token: str) -> None:
        """
        Expire the user's stored token matching ``refresh_token``.

        Raises:
            NotFoundError: If no unexpired token of the user matches.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                token = await tx.token_get(user_id, refresh_token, self.hasher)
            except NoRecordError:
                msg = "token not found"
                raise NotFoundError(msg) from None
            await tx.token_update(token.id, TokenPatch(expires_at=utcnow()))

        logger.info("user_logged_out", user_id=user_id, token_id=token.id)

    async def refresh(self, user_id: int, refresh_token: str) -> RefreshResult:
        """
        Issue a new access token for a valid refresh credential.

        Raises:
            NotFoundError: If no unexpired token of the user matches.
        """
        try:
            token = await self.repo.token_get(user_id, refresh_token, self.hasher)
        except NoRecordError:
            msg = "token not found"
            raise NotFoundError(msg) from None

        access_token, access_expires_at = self.issuer.issue_access_token(TokenPayload(user_id=token.user_id))
        logger.debug("access_token_refreshed", user_id=token.user_id)
        return RefreshResult(access_token=access_token, access_expires_at=access_expires_at)
