"""User accessors."""

from __future__ import annotations

from sqlalchemy import delete, func, select, update

from wls.db.models import User
from wls.repo.base import StoreBase, affected_or_raise, one_or_raise
from wls.repo.patches import UserPatch


class UserStore(StoreBase):
    async def user_get(self, user_id: int, *, lock: bool = False) -> User:
        """Fetch a user by ID. ``lock`` holds the row until the transaction ends."""
        stmt = select(User).where(User.id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        async with self._session() as db:
            return await one_or_raise(db, stmt, "user")

    async def user_get_by_email(self, email: str) -> User:
        """Fetch a user by email (case-insensitive)."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        async with self._session() as db:
            return await one_or_raise(db, stmt, "user")

    async def users_count(self) -> int:
        async with self._session() as db:
            return (await db.execute(select(func.count()).select_from(User))).scalar_one()

    async def user_create(self, user: User) -> User:
        async with self._session() as db:
            db.add(user)
            await db.flush()
            return user

    async def user_update(self, user_id: int, patch: UserPatch) -> None:
        async with self._session() as db:
            if patch.is_empty():
                await one_or_raise(db, select(User.id).where(User.id == user_id), "user")
                return
            result = await db.execute(update(User).where(User.id == user_id).values(**patch.to_columns()))
            affected_or_raise(result, "user")

    async def user_delete(self, user_id: int) -> None:
        async with self._session() as db:
            result = await db.execute(delete(User).where(User.id == user_id))
            affected_or_raise(result, "user")
