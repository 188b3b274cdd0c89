"""Series business logic. Mirrors movies: audited updates and poster changes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, BinaryIO

import structlog

from wls.db.models import Series, SeriesAudit
from wls.errors import NotFoundError
from wls.repo.errors import NoRecordError
from wls.repo.patches import SeriesPatch
from wls.repo.query import ListOptions, SearchOptions, SortOrderOptions
from wls.search.provider import check_query
from wls.storage.blob import PutOptions

if TYPE_CHECKING:
    from wls.catalog.schemas import InvalidationRequest, SeriesCreateRequest, SeriesUpdateRequest
    from wls.config import Settings
    from wls.repo import RepositoryTx
    from wls.search.provider import SearchProvider
    from wls.storage.blob import BlobStorage

logger = structlog.get_logger()


def _not_found() -> NotFoundError:
    return NotFoundError("series not found")


class SeriesService:
    def __init__(
        self,
        repo: RepositoryTx,
        storage: BlobStorage,
        search: SearchProvider,
        settings: Settings,
    ) -> None:
        self.repo = repo
        self.storage = storage
        self.search_provider = search
        self.settings = settings

    async def get(self, series_id: int) -> Series:
        try:
            return await self.repo.series_get(series_id)
        except NoRecordError:
            raise _not_found() from None

    async def get_all(self, options: ListOptions) -> tuple[Sequence[Series], int]:
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            serieses = await tx.serieses_get_all(options)
            total = await tx.serieses_count()
        return serieses, total

    async def search(self, options: SearchOptions) -> tuple[Sequence[Series], int]:
        return await self.search_provider.search_serieses(check_query(options, self.settings))

    async def create(self, contributor_id: int, req: SeriesCreateRequest) -> int:
        series = await self.repo.series_create(
            contributor_id,
            Series(
                title=req.title,
                description=req.description,
                date_started=req.date_started,
                date_ended=req.date_ended,
            ),
        )
        logger.info("series_created", series_id=series.id, contributor_id=contributor_id)
        return series.id

    async def update(self, series_id: int, contributor_id: int, req: SeriesUpdateRequest) -> None:
        patch = SeriesPatch(**req.model_dump(exclude_unset=True))
        try:
            await self.repo.series_update(series_id, contributor_id, patch)
        except NoRecordError:
            raise _not_found() from None
        logger.info("series_updated", series_id=series_id, contributor_id=contributor_id)

    async def invalidate(self, series_id: int, contributor_id: int, req: InvalidationRequest) -> None:
        try:
            await self.repo.series_invalidate(series_id, req.invalidation)
        except NoRecordError:
            raise _not_found() from None
        logger.info("series_invalidated", series_id=series_id, contributor_id=contributor_id)

    async def audits_get_all(
        self, series_id: int, options: SortOrderOptions
    ) -> tuple[Sequence[SeriesAudit], int]:
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                await tx.series_get(series_id)
            except NoRecordError:
                raise _not_found() from None
            audits = await tx.series_audits_get_all(series_id, options)
            total = await tx.series_audits_count(series_id)
        return audits, total

    # ---------------------------------------------------------------------------
    # Poster
    # ---------------------------------------------------------------------------

    def poster_options(self, series_id: int, content_type: str, size: int) -> PutOptions:
        return PutOptions(
            bucket=self.settings.storage_bucket,
            category=self.settings.storage_category_series,
            category_id=series_id,
            filename=self.settings.storage_filename_series,
            content_type=content_type,
            size=size,
        )

    async def put_poster(self, series_id: int, contributor_id: int, stream: BinaryIO, options: PutOptions) -> str:
        uri = await self.storage.put(stream, options)
        try:
            await self.repo.series_update(series_id, contributor_id, SeriesPatch(poster=uri))
        except NoRecordError:
            logger.warning("orphaned_blob", uri=uri, series_id=series_id)
            raise _not_found() from None
        except BaseException as exc:
            logger.warning("orphaned_blob", uri=uri, series_id=series_id, error=type(exc).__name__)
            raise
        logger.info("series_poster_updated", series_id=series_id, uri=uri)
        return uri
