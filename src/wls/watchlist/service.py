"""Personal watchlist business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from wls.errors import NotFoundError
from wls.repo.errors import NoRecordError
from wls.repo.query import WatchlistItem, WatchlistOptions

if TYPE_CHECKING:
    from wls.config import Settings
    from wls.repo import RepositoryTx

logger = structlog.get_logger()


class WatchlistService:
    def __init__(self, repo: RepositoryTx, settings: Settings) -> None:
        self.repo = repo
        self.settings = settings

    async def get(self, user_id: int, options: WatchlistOptions) -> tuple[list[WatchlistItem], int]:
        """Return one page of the user's watchlist and the total under the same filter."""
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            items = await tx.watchlist_get(user_id, options)
            total = await tx.watchlist_count(user_id, options.watched)
        return items, total

    async def add(self, user_id: int, film_id: int) -> int:
        """
        Add a movie or episode to the user's watchlist.

        Raises:
            NotFoundError: If the film does not exist.
        """
        async with self.repo.transaction(self.settings.transaction_isolation_level) as tx:
            try:
                await tx.film_exists(film_id)
            except NoRecordError:
                msg = "film not found"
                raise NotFoundError(msg) from None
            watch_id = await tx.watchlist_add(user_id, film_id)
        logger.info("watchlist_added", user_id=user_id, film_id=film_id, watch_id=watch_id)
        return watch_id

    async def delete(self, user_id: int, watch_id: int) -> None:
        try:
            await self.repo.watchlist_delete(user_id, watch_id)
        except NoRecordError:
            msg = "watchlist entry not found"
            raise NotFoundError(msg) from None
        logger.info("watchlist_deleted", user_id=user_id, watch_id=watch_id)

    async def set_watched(self, user_id: int, watch_id: int) -> None:
        try:
            await self.repo.watchlist_set_watched(user_id, watch_id)
        except NoRecordError:
            msg = "watchlist entry not found"
            raise NotFoundError(msg) from None
        logger.info("watchlist_watched", user_id=user_id, watch_id=watch_id)
