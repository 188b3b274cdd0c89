"""
Episode business logic.

Episodes are addressed by (series, season, episode). Writes that may create
an episode first check that the series exists, in the same transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from wls.db.models import Film, FilmAudit
from wls.errors import NotFoundError
from wls.repo.errors import NoRecordError
from wls.repo.patches import FilmPatch
from wls.repo.query import SortOrderOptions

if TYPE_CHECKING:
    from wls.catalog.schemas import (
        EpisodePutRequest,
        EpisodesPutAllBySeasonRequest,
        EpisodeUpdateRequest,
        InvalidationRequest,
    )
    from wls.config import Settings
    from wls.repo import Repository, RepositoryTx

logger = structlog.get_logger()


def _film_from_request(req: EpisodePutRequest) -> Film:
    return Film(
        title=req.title,
        description=req.description,
        date_released=req.date_released,
        duration=req.duration,
    )


class EpisodeService:
    def __init__(self, repo: RepositoryTx, settings: Settings) -> None:
        self.repo = repo
        self.settings = settings

    async def _require_series(self, tx: Repository, series_id: int) -> None:
        try:
            await tx.series_get(series_id)
        except NoRecordError:
            msg = "series not found"
            raise NotFoundError(msg) from None

    async def get(self, series_id: int, season: int, episode: int) -> Film:
        try:
            return await self.repo.episode_get(series_id, season, episode)
        except NoRecordError:
            msg = "episode not found"
            raise NotFoundError(msg) from None

    async def get_all_by_series(self, series_id: int, options: SortOrderOptions) -> tuple[Sequence[Film], int]:
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            await self._require_series(tx, series_id)
            episodes = await tx.episodes_get_all_by_series(series_id, options)
            total = await tx.episodes_count_by_series(series_id)
        return episodes, total

    async def get_all_by_season(
        self, series_id: int, season: int, options: SortOrderOptions
    ) -> tuple[Sequence[Film], int]:
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            await self._require_series(tx, series_id)
            episodes = await tx.episodes_get_all_by_season(series_id, season, options)
            total = await tx.episodes_count_by_season(series_id, season)
        return episodes, total

    # ---------------------------------------------------------------------------
    # Put
    # ---------------------------------------------------------------------------

    async def put(
        self,
        series_id: int,
        season: int,
        episode: int,
        contributor_id: int,
        req: EpisodePutRequest,
    ) -> int:
        """
        Create or replace one episode.

        Returns:
            The episode's film ID, unchanged when an existing episode is replaced.

        Raises:
            NotFoundError: If the series does not exist.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            await self._require_series(tx, series_id)
            film = await tx.episode_put(series_id, season, episode, contributor_id, _film_from_request(req))
        logger.info(
            "episode_put",
            series_id=series_id,
            season=season,
            episode=episode,
            film_id=film.id,
            contributor_id=contributor_id,
        )
        return film.id

    async def put_all_by_season(
        self,
        series_id: int,
        season: int,
        contributor_id: int,
        req: EpisodesPutAllBySeasonRequest,
    ) -> None:
        """
        Create or replace a whole season; episode N is ``req.episodes[N - 1]``.

        All episodes are written or none are.

        Raises:
            NotFoundError: If the series does not exist.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            await self._require_series(tx, series_id)
            for number, episode_req in enumerate(req.episodes, start=1):
                await tx.episode_put(series_id, season, number, contributor_id, _film_from_request(episode_req))
        logger.info(
            "season_put",
            series_id=series_id,
            season=season,
            episodes=len(req.episodes),
            contributor_id=contributor_id,
        )

    # ---------------------------------------------------------------------------
    # Update / invalidate
    # ---------------------------------------------------------------------------

    async def update(
        self,
        series_id: int,
        season: int,
        episode: int,
        contributor_id: int,
        req: EpisodeUpdateRequest,
    ) -> None:
        patch = FilmPatch(**req.model_dump(exclude_unset=True))
        try:
            await self.repo.episode_update(series_id, season, episode, contributor_id, patch)
        except NoRecordError:
            msg = "episode not found"
            raise NotFoundError(msg) from None
        logger.info("episode_updated", series_id=series_id, season=season, episode=episode)

    async def invalidate(
        self,
        series_id: int,
        season: int,
        episode: int,
        contributor_id: int,
        req: InvalidationRequest,
    ) -> None:
        try:
            await self.repo.episode_invalidate(series_id, season, episode, req.invalidation)
        except NoRecordError:
            msg = "episode not found"
            raise NotFoundError(msg) from None
        logger.info(
            "episode_invalidated",
            series_id=series_id,
            season=season,
            episode=episode,
            contributor_id=contributor_id,
        )

    async def invalidate_all_by_season(
        self,
        series_id: int,
        season: int,
        contributor_id: int,
        req: InvalidationRequest,
    ) -> None:
        """
        Invalidate every episode of a season.

        Raises:
            NotFoundError: If the season has no episodes.
        """
        try:
            count = await self.repo.episodes_invalidate_all_by_season(series_id, season, req.invalidation)
        except NoRecordError:
            msg = "season not found"
            raise NotFoundError(msg) from None
        logger.info(
            "season_invalidated",
            series_id=series_id,
            season=season,
            episodes=count,
            contributor_id=contributor_id,
        )

    async def audits_get_all(
        self,
        series_id: int,
        season: int,
        episode: int,
        options: SortOrderOptions,
    ) -> tuple[Sequence[FilmAudit], int]:
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                await tx.episode_get(series_id, season, episode)
            except NoRecordError:
                msg = "episode not found"
                raise NotFoundError(msg) from None
            audits = await tx.episode_audits_get_all(series_id, season, episode, options)
            total = await tx.episode_audits_count(series_id, season, episode)
        return audits, total
