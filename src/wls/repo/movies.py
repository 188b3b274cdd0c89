"""Movie accessors. A movie is a film row with no series discriminators."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import ColumnElement, and_, func, select, update

from wls.db.models import Film, FilmAudit
from wls.repo.audit import lock_current, overwrite
from wls.repo.base import StoreBase, affected_or_raise, one_or_raise
from wls.repo.errors import NoRecordError
from wls.repo.patches import FilmPatch
from wls.repo.query import ListOptions, SortOrderOptions, ordered


def is_movie(model: type[Film] | type[FilmAudit]) -> ColumnElement[bool]:
    return and_(
        model.series_id.is_(None),
        model.season_number.is_(None),
        model.episode_number.is_(None),
    )


class MovieStore(StoreBase):
    async def movie_get(self, movie_id: int) -> Film:
        stmt = select(Film).where(Film.id == movie_id, is_movie(Film))
        async with self._session() as db:
            return await one_or_raise(db, stmt, "movie")

    async def movies_get_all(self, options: ListOptions) -> Sequence[Film]:
        stmt = (
            select(Film)
            .where(is_movie(Film))
            .order_by(options.order_by(Film))
            .offset(options.offset)
            .limit(options.limit)
        )
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def movies_count(self) -> int:
        stmt = select(func.count()).select_from(Film).where(is_movie(Film))
        async with self._session() as db:
            return (await db.execute(stmt)).scalar_one()

    async def movie_create(self, contributor_id: int, movie: Film) -> Film:
        movie.series_id = None
        movie.season_number = None
        movie.episode_number = None
        movie.contributed_by = contributor_id
        async with self._session() as db:
            db.add(movie)
            await db.flush()
            return movie

    async def movie_update(self, movie_id: int, contributor_id: int, patch: FilmPatch) -> Film:
        """Overwrite a movie, archiving its current version first."""
        async with self._session() as db:
            current = await lock_current(db, select(Film).where(Film.id == movie_id, is_movie(Film)))
            if current is None:
                msg = "movie not found"
                raise NoRecordError(msg)
            return await overwrite(db, current, contributor_id, patch.to_columns())

    async def movie_invalidate(self, movie_id: int, invalidation: str) -> None:
        stmt = update(Film).where(Film.id == movie_id, is_movie(Film)).values(invalidation=invalidation)
        async with self._session() as db:
            affected_or_raise(await db.execute(stmt), "movie")

    # --- Audits ---

    async def movie_audits_get_all(self, movie_id: int, options: SortOrderOptions) -> Sequence[FilmAudit]:
        stmt = (
            select(FilmAudit)
            .where(FilmAudit.id == movie_id, is_movie(FilmAudit))
            .order_by(ordered(FilmAudit.contributed_at, options.sort_order))
            .offset(options.offset)
            .limit(options.limit)
        )
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def movie_audits_count(self, movie_id: int) -> int:
        stmt = select(func.count()).select_from(FilmAudit).where(FilmAudit.id == movie_id, is_movie(FilmAudit))
        async with self._session() as db:
            return (await db.execute(stmt)).scalar_one()
