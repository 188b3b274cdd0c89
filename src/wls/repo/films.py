"""Accessors over the films table regardless of kind."""

from __future__ import annotations

from sqlalchemy import select

from wls.db.models import Film
from wls.repo.base import StoreBase, one_or_raise


class FilmStore(StoreBase):
    async def film_exists(self, film_id: int) -> None:
        """Raise NoRecordError unless a movie or episode with this ID exists."""
        async with self._session() as db:
            await one_or_raise(db, select(Film.id).where(Film.id == film_id), "film")
