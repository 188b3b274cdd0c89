"""Refresh-token accessors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update

from wls.auth.password import HashMismatchError
from wls.db.models import Token, utcnow
from wls.repo.base import StoreBase, affected_or_raise, one_or_raise
from wls.repo.errors import NoRecordError
from wls.repo.patches import TokenPatch

if TYPE_CHECKING:
    from wls.auth.password import Hasher


class TokenStore(StoreBase):
    async def token_get(self, user_id: int, refresh_token: str, hasher: Hasher) -> Token:
        """Find the user's unexpired token whose digest matches ``refresh_token``.

        Digests are salted, so candidates are narrowed by owner and expiry in
        SQL and then compared one by one with ``hasher``.
        """
        stmt = (
            select(Token)
            .where(Token.user_id == user_id)
            .where(Token.expires_at > utcnow())
            .order_by(Token.id.desc())
        )
        async with self._session() as db:
            candidates = (await db.execute(stmt)).scalars().all()
        for token in candidates:
            try:
                hasher.compare(token.token_hash, refresh_token)
            except HashMismatchError:
                continue
            return token
        msg = "token not found"
        raise NoRecordError(msg)

    async def token_create(self, token: Token) -> Token:
        async with self._session() as db:
            db.add(token)
            await db.flush()
            return token

    async def token_update(self, token_id: int, patch: TokenPatch) -> None:
        async with self._session() as db:
            if patch.is_empty():
                await one_or_raise(db, select(Token.id).where(Token.id == token_id), "token")
                return
            result = await db.execute(update(Token).where(Token.id == token_id).values(**patch.to_columns()))
            affected_or_raise(result, "token")
