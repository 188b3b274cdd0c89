"""
Movie business logic.

Every update and poster change archives the movie's previous version.
Invalidation only attaches a note.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, BinaryIO

import structlog

from wls.db.models import Film, FilmAudit
from wls.errors import NotFoundError
from wls.repo.errors import NoRecordError
from wls.repo.patches import FilmPatch
from wls.repo.query import ListOptions, SearchOptions, SortOrderOptions
from wls.search.provider import check_query
from wls.storage.blob import PutOptions

if TYPE_CHECKING:
    from wls.catalog.schemas import InvalidationRequest, MovieCreateRequest, MovieUpdateRequest
    from wls.config import Settings
    from wls.repo import RepositoryTx
    from wls.search.provider import SearchProvider
    from wls.storage.blob import BlobStorage

logger = structlog.get_logger()


class MovieService:
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

    async def get(self, movie_id: int) -> Film:
        try:
            return await self.repo.movie_get(movie_id)
        except NoRecordError:
            msg = "movie not found"
            raise NotFoundError(msg) from None

    async def get_all(self, options: ListOptions) -> tuple[Sequence[Film], int]:
        """Return one page of movies and the total number of movies."""
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            movies = await tx.movies_get_all(options)
            total = await tx.movies_count()
        return movies, total

    async def search(self, options: SearchOptions) -> tuple[Sequence[Film], int]:
        return await self.search_provider.search_movies(check_query(options, self.settings))

    async def create(self, contributor_id: int, req: MovieCreateRequest) -> int:
        movie = await self.repo.movie_create(
            contributor_id,
            Film(
                title=req.title,
                description=req.description,
                date_released=req.date_released,
                duration=req.duration,
            ),
        )
        logger.info("movie_created", movie_id=movie.id, contributor_id=contributor_id)
        return movie.id

    async def update(self, movie_id: int, contributor_id: int, req: MovieUpdateRequest) -> None:
        patch = FilmPatch(**req.model_dump(exclude_unset=True))
        try:
            await self.repo.movie_update(movie_id, contributor_id, patch)
        except NoRecordError:
            msg = "movie not found"
            raise NotFoundError(msg) from None
        logger.info("movie_updated", movie_id=movie_id, contributor_id=contributor_id)

    async def invalidate(self, movie_id: int, contributor_id: int, req: InvalidationRequest) -> None:
        try:
            await self.repo.movie_invalidate(movie_id, req.invalidation)
        except NoRecordError:
            msg = "movie not found"
            raise NotFoundError(msg) from None
        logger.info("movie_invalidated", movie_id=movie_id, contributor_id=contributor_id)

    async def audits_get_all(self, movie_id: int, options: SortOrderOptions) -> tuple[Sequence[FilmAudit], int]:
        """
        Return one page of a movie's previous versions and their total count.

        Raises:
            NotFoundError: If the movie does not exist.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                await tx.movie_get(movie_id)
            except NoRecordError:
                msg = "movie not found"
                raise NotFoundError(msg) from None
            audits = await tx.movie_audits_get_all(movie_id, options)
            total = await tx.movie_audits_count(movie_id)
        return audits, total

    # ---------------------------------------------------------------------------
    # Poster
    # ---------------------------------------------------------------------------

    def poster_options(self, movie_id: int, content_type: str, size: int) -> PutOptions:
        return PutOptions(
            bucket=self.settings.storage_bucket,
            category=self.settings.storage_category_movie,
            category_id=movie_id,
            filename=self.settings.storage_filename_movie,
            content_type=content_type,
            size=size,
        )

    async def put_poster(self, movie_id: int, contributor_id: int, stream: BinaryIO, options: PutOptions) -> str:
        """Store the poster blob, then record its URI as a new movie version."""
        uri = await self.storage.put(stream, options)
        try:
            await self.repo.movie_update(movie_id, contributor_id, FilmPatch(poster=uri))
        except NoRecordError:
            logger.warning("orphaned_blob", uri=uri, movie_id=movie_id)
            msg = "movie not found"
            raise NotFoundError(msg) from None
        except BaseException as exc:
            logger.warning("orphaned_blob", uri=uri, movie_id=movie_id, error=type(exc).__name__)
            raise
        logger.info("movie_poster_updated", movie_id=movie_id, uri=uri)
        return uri
