"""The entity store, composed from the per-entity accessor mixins."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from wls.repo.episodes import EpisodeStore
from wls.repo.films import FilmStore
from wls.repo.movies import MovieStore
from wls.repo.series import SeriesStore
from wls.repo.tokens import TokenStore
from wls.repo.users import UserStore
from wls.repo.watchlist import WatchlistStore


class Store(UserStore, TokenStore, SeriesStore, MovieStore, EpisodeStore, FilmStore, WatchlistStore):
    """Every entity accessor. Subclasses decide where the session comes from."""


class Repository(Store):
    """Entity store bound to one open session and its transaction.

    This is what a transaction body receives. It cannot start another
    transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        yield self._db
