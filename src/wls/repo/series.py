"""Series accessors and their audit history."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select, update

from wls.db.models import Series, SeriesAudit
from wls.repo.audit import lock_current, overwrite
from wls.repo.base import StoreBase, affected_or_raise, one_or_raise
from wls.repo.errors import NoRecordError
from wls.repo.patches import SeriesPatch
from wls.repo.query import ListOptions, SortOrderOptions, ordered


class SeriesStore(StoreBase):
    async def series_get(self, series_id: int) -> Series:
        async with self._session() as db:
            return await one_or_raise(db, select(Series).where(Series.id == series_id), "series")

    async def serieses_get_all(self, options: ListOptions) -> Sequence[Series]:
        stmt = select(Series).order_by(options.order_by(Series)).offset(options.offset).limit(options.limit)
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def serieses_count(self) -> int:
        async with self._session() as db:
            return (await db.execute(select(func.count()).select_from(Series))).scalar_one()

    async def series_create(self, contributor_id: int, series: Series) -> Series:
        series.contributed_by = contributor_id
        async with self._session() as db:
            db.add(series)
            await db.flush()
            return series

    async def series_update(self, series_id: int, contributor_id: int, patch: SeriesPatch) -> Series:
        """Overwrite a series, archiving its current version first."""
        async with self._session() as db:
            current = await lock_current(db, select(Series).where(Series.id == series_id))
            if current is None:
                msg = "series not found"
                raise NoRecordError(msg)
            return await overwrite(db, current, contributor_id, patch.to_columns())

    async def series_invalidate(self, series_id: int, invalidation: str) -> None:
        async with self._session() as db:
            result = await db.execute(
                update(Series).where(Series.id == series_id).values(invalidation=invalidation)
            )
            affected_or_raise(result, "series")

    # --- Audits ---

    async def series_audits_get_all(self, series_id: int, options: SortOrderOptions) -> Sequence[SeriesAudit]:
        stmt = (
            select(SeriesAudit)
            .where(SeriesAudit.id == series_id)
            .order_by(ordered(SeriesAudit.contributed_at, options.sort_order))
            .offset(options.offset)
            .limit(options.limit)
        )
        async with self._session() as db:
            return (await db.execute(stmt)).scalars().all()

    async def series_audits_count(self, series_id: int) -> int:
        stmt = select(func.count()).select_from(SeriesAudit).where(SeriesAudit.id == series_id)
        async with self._session() as db:
            return (await db.execute(stmt)).scalar_one()
