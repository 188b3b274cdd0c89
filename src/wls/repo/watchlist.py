"""Watchlist accessors. Every mutation is scoped to the owning user."""

from __future__ import annotations

from sqlalchemy import delete, func, update

from wls.db.models import WatchFilm, utcnow
from wls.repo.base import StoreBase, affected_or_raise
from wls.repo.query import WatchedFilter, WatchlistItem, WatchlistOptions, build_watchlist_queries


class WatchlistStore(StoreBase):
    async def watchlist_get(self, user_id: int, options: WatchlistOptions) -> list[WatchlistItem]:
        list_stmt, _ = build_watchlist_queries(user_id, options)
        async with self._session() as db:
            rows = (await db.execute(list_stmt)).all()
        return [WatchlistItem.from_row(entry, film) for entry, film in rows]

    async def watchlist_count(self, user_id: int, watched: WatchedFilter = WatchedFilter.ALL) -> int:
        _, count_stmt = build_watchlist_queries(user_id, WatchlistOptions(watched=watched))
        async with self._session() as db:
            return (await db.execute(count_stmt)).scalar_one()

    async def watchlist_add(self, user_id: int, film_id: int) -> int:
        entry = WatchFilm(user_id=user_id, film_id=film_id)
        async with self._session() as db:
            db.add(entry)
            await db.flush()
            return entry.id

    async def watchlist_delete(self, user_id: int, watch_id: int) -> None:
        stmt = delete(WatchFilm).where(WatchFilm.id == watch_id, WatchFilm.user_id == user_id)
        async with self._session() as db:
            affected_or_raise(await db.execute(stmt), "watchlist entry")

    async def watchlist_set_watched(self, user_id: int, watch_id: int) -> None:
        """Stamp an entry as watched. An entry already watched keeps its first time."""
        stmt = (
            update(WatchFilm)
            .where(WatchFilm.id == watch_id, WatchFilm.user_id == user_id)
            .values(time_watched=func.coalesce(WatchFilm.time_watched, utcnow()))
            .execution_options(synchronize_session=False)
        )
        async with self._session() as db:
            affected_or_raise(await db.execute(stmt), "watchlist entry")
