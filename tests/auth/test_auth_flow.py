"""Login, logout and refresh."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from fakes import TEST_PASSWORD
from wls.app import Application
from wls.auth.password import Argon2Hasher
from wls.auth.tokens import JwtIssuer
from wls.db.models import Token, User, utcnow
from wls.errors import FaultKind, IncorrectCredentialError, NotFoundError
from wls.repo import RepositoryTx
from wls.users.schemas import LoginRequest


async def _tokens_of(repo: RepositoryTx, user_id: int) -> list[Token]:
    async with repo.session_factory() as db:
        result = await db.execute(select(Token).where(Token.user_id == user_id))
        return list(result.scalars().all())


class TestLogin:
    async def test_login_issues_one_access_and_one_refresh(
        self, app: Application, repo: RepositoryTx, user: User, hasher: Argon2Hasher, issuer: JwtIssuer
    ):
        result = await app.auth.login(LoginRequest(email="Alice@Example.com", password=TEST_PASSWORD))

        assert result.user_id == user.id
        assert issuer.decode_access_token(result.access_token).user_id == user.id
        tokens = await _tokens_of(repo, user.id)
        assert len(tokens) == 1
        hasher.compare(tokens[0].token_hash, result.refresh_token)
        assert tokens[0].token_hash != result.refresh_token

    async def test_unknown_email(self, app: Application):
        with pytest.raises(NotFoundError) as excinfo:
            await app.auth.login(LoginRequest(email="nobody@example.com", password=TEST_PASSWORD))
        assert excinfo.value.kind is FaultKind.NOT_FOUND

    async def test_wrong_password_persists_nothing(self, app: Application, repo: RepositoryTx, user: User):
        with pytest.raises(IncorrectCredentialError):
            await app.auth.login(LoginRequest(email=user.email, password="WrongPassword1"))
        assert await _tokens_of(repo, user.id) == []


class TestLogout:
    async def test_logout_expires_token(self, app: Application, user: User):
        session = await app.auth.login(LoginRequest(email=user.email, password=TEST_PASSWORD))
        await app.auth.logout(user.id, session.refresh_token)

        with pytest.raises(NotFoundError):
            await app.auth.refresh(user.id, session.refresh_token)
        with pytest.raises(NotFoundError):
            await app.auth.logout(user.id, session.refresh_token)

    async def test_logout_only_affects_matching_token(self, app: Application, user: User):
        first = await app.auth.login(LoginRequest(email=user.email, password=TEST_PASSWORD))
        second = await app.auth.login(LoginRequest(email=user.email, password=TEST_PASSWORD))
        await app.auth.logout(user.id, first.refresh_token)

        refreshed = await app.auth.refresh(user.id, second.refresh_token)
        assert refreshed.access_token

    async def test_token_of_another_user_not_found(self, app: Application, user: User, other_user: User):
        session = await app.auth.login(LoginRequest(email=user.email, password=TEST_PASSWORD))
        with pytest.raises(NotFoundError):
            await app.auth.logout(other_user.id, session.refresh_token)


class TestRefresh:
    async def test_refresh_issues_access_token_for_owner(self, app: Application, user: User, issuer: JwtIssuer):
        session = await app.auth.login(LoginRequest(email=user.email, password=TEST_PASSWORD))
        refreshed = await app.auth.refresh(user.id, session.refresh_token)
        assert issuer.decode_access_token(refreshed.access_token).user_id == user.id

    async def test_refresh_does_not_rotate(self, app: Application, repo: RepositoryTx, user: User):
        session = await app.auth.login(LoginRequest(email=user.email, password=TEST_PASSWORD))
        await app.auth.refresh(user.id, session.refresh_token)
        await app.auth.refresh(user.id, session.refresh_token)
        assert len(await _tokens_of(repo, user.id)) == 1

    async def test_expired_credential_not_found(self, app: Application, repo: RepositoryTx, user: User, hasher):
        value = "expired-refresh-credential"
        await repo.token_create(
            Token(
                token_hash=hasher.hash(value),
                user_id=user.id,
                expires_at=utcnow() - timedelta(days=1),
            )
        )
        with pytest.raises(NotFoundError):
            await app.auth.refresh(user.id, value)

    async def test_unknown_credential_not_found(self, app: Application, user: User):
        with pytest.raises(NotFoundError):
            await app.auth.refresh(user.id, "never-issued")
