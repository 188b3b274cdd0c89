"""Episode accessors, addressed by the (series, season, episode) natural key."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import structlog
from sqlalchemy import ColumnElement, and_, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from wls.db.models import Film, FilmAudit, utcnow
from wls.repo.audit import lock_current, overwrite
from wls.repo.base import StoreBase, affected_or_raise, one_or_raise
from wls.repo.errors import NoRecordError
from wls.repo.patches import FilmPatch
from wls.repo.query import SortOrderOptions, ordered

logger = structlog.get_logger()

# Columns a put replaces on an existing episode; the poster is managed separately
PUT_COLUMNS = ("title", "description", "date_released", "duration")


def _insert_for(db: AsyncSession) -> Callable[..., Any]:
    """The dialect's INSERT construct, which carries ON CONFLICT support."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


def natural_key(
    model: type[Film] | type[FilmAudit],
    series_id: int,
    season: int,
    episode: int | None = None,
) -> ColumnElement[bool]:
    criteria = [model.series_id == series_id, model.season_number == season]
    if episode is not None:
        criteria.append(model.episode_number == episode)
    return and_(*criteria)


class EpisodeStore(StoreBase):
    async def episode_get(self, series_id: int, season: int, episode: int) -> Film:
        stmt = select(Film).where(natural_key(Film, series_id, season, episode))
        async with self._session() as db:
            return await one_or_raise(db, stmt, "episode")

    async def episodes_get_all_by_series(self, series_id: int, options: SortOrderOptions) -> Sequence[Film]:
        """List a series' episodes by season (requested order), then episode number."""
        stmt = (
            select(Film)
            .where(Film.series_id == series_id)
            .order_by(ordered(Film.season_number, options.sort_order), Film.episode_number.asc())
            .offset(options.offset)
            .limit(options.limit)
        )
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def episodes_get_all_by_season(
        self, series_id: int, season: int, options: SortOrderOptions
    ) -> Sequence[Film]:
        stmt = (
            select(Film)
            .where(natural_key(Film, series_id, season))
            .order_by(ordered(Film.episode_number, options.sort_order))
            .offset(options.offset)
            .limit(options.limit)
        )
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def episodes_count_by_series(self, series_id: int) -> int:
        stmt = select(func.count()).select_from(Film).where(Film.series_id == series_id)
        async with self._session() as db:
            return (await db.execute(stmt)).scalar_one()

    async def episodes_count_by_season(self, series_id: int, season: int) -> int:
        stmt = select(func.count()).select_from(Film).where(natural_key(Film, series_id, season))
        async with self._session() as db:
            return (await db.execute(stmt)).scalar_one()

    async def episode_put(
        self,
        series_id: int,
        season: int,
        episode: int,
        contributor_id: int,
        values: Film,
    ) -> Film:
        """Insert the episode at its natural key, or replace the one already there.

        A replace archives the previous version and keeps the surrogate id. The
        insert does nothing on a natural-key conflict, so a put that loses a race
        to a concurrent insert replaces that row instead of failing.
        """
        by_key = select(Film).where(natural_key(Film, series_id, season, episode))
        columns = {name: getattr(values, name) for name in PUT_COLUMNS}
        async with self._session() as db:
            current = await lock_current(db, by_key)
            if current is None:
                stmt = (
                    _insert_for(db)(Film)
                    .values(
                        series_id=series_id,
                        season_number=season,
                        episode_number=episode,
                        poster=values.poster,
                        contributed_by=contributor_id,
                        contributed_at=utcnow(),
                        **columns,
                    )
                    .on_conflict_do_nothing(index_elements=["series_id", "season_number", "episode_number"])
                    .returning(Film.id)
                )
                film_id = (await db.execute(stmt)).scalar_one_or_none()
                if film_id is not None:
                    logger.debug("episode_inserted", series_id=series_id, season=season, episode=episode, id=film_id)
                    return await one_or_raise(db, select(Film).where(Film.id == film_id), "episode")

                # A concurrent put inserted the key first; replace its version instead
                current = await lock_current(db, by_key)
                if current is None:
                    msg = "episode not found"
                    raise NoRecordError(msg)
            return await overwrite(db, current, contributor_id, columns)

    async def episode_update(
        self,
        series_id: int,
        season: int,
        episode: int,
        contributor_id: int,
        patch: FilmPatch,
    ) -> Film:
        async with self._session() as db:
            current = await lock_current(db, select(Film).where(natural_key(Film, series_id, season, episode)))
            if current is None:
                msg = "episode not found"
                raise NoRecordError(msg)
            return await overwrite(db, current, contributor_id, patch.to_columns())

    async def episode_invalidate(self, series_id: int, season: int, episode: int, invalidation: str) -> None:
        stmt = update(Film).where(natural_key(Film, series_id, season, episode)).values(invalidation=invalidation)
        async with self._session() as db:
            affected_or_raise(await db.execute(stmt), "episode")

    async def episodes_invalidate_all_by_season(self, series_id: int, season: int, invalidation: str) -> int:
        """Invalidate every episode of a season. Raises NoRecordError when the season is empty."""
        stmt = update(Film).where(natural_key(Film, series_id, season)).values(invalidation=invalidation)
        async with self._session() as db:
            return affected_or_raise(await db.execute(stmt), "season")

    # --- Audits ---

    async def episode_audits_get_all(
        self,
        series_id: int,
        season: int,
        episode: int,
        options: SortOrderOptions,
    ) -> Sequence[FilmAudit]:
        stmt = (
            select(FilmAudit)
            .where(natural_key(FilmAudit, series_id, season, episode))
            .order_by(ordered(FilmAudit.contributed_at, options.sort_order))
            .offset(options.offset)
            .limit(options.limit)
        )
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def episode_audits_count(self, series_id: int, season: int, episode: int) -> int:
        stmt = select(func.count()).select_from(FilmAudit).where(natural_key(FilmAudit, series_id, season, episode))
        async with self._session() as db:
            return (await db.execute(stmt)).scalar_one()
