"""Application factory: wires the store, collaborators and services together."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wls.auth.password import Argon2Hasher, Hasher
from wls.auth.service import AuthService
from wls.auth.tokens import JwtIssuer, TokenIssuer
from wls.catalog.episodes import EpisodeService
from wls.catalog.movies import MovieService
from wls.catalog.series import SeriesService
from wls.config import Settings, get_settings
from wls.database import close_db, get_session_factory, init_db
from wls.logging_setup import setup_logging
from wls.repo import RepositoryTx
from wls.search.provider import DatabaseSearch, SearchProvider
from wls.storage.blob import BlobStorage, LocalBlobStorage
from wls.users.service import UserService
from wls.watchlist.service import WatchlistService

logger = structlog.get_logger()


@dataclass
class Application:
    settings: Settings
    repo: RepositoryTx
    users: UserService
    auth: AuthService
    movies: MovieService
    serieses: SeriesService
    episodes: EpisodeService
    watchlist: WatchlistService

    @classmethod
    def from_session_factory(
        cls,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        hasher: Hasher | None = None,
        issuer: TokenIssuer | None = None,
        storage: BlobStorage | None = None,
        search: SearchProvider | None = None,
    ) -> Application:
        """Build the services over an existing session factory. Unset collaborators come from settings."""
        repo = RepositoryTx(session_factory)
        hasher = hasher or Argon2Hasher.from_settings(settings)
        issuer = issuer or JwtIssuer.from_settings(settings)
        storage = storage or LocalBlobStorage.from_settings(settings)
        search = search or DatabaseSearch(session_factory)

        return cls(
            settings=settings,
            repo=repo,
            users=UserService(repo, hasher, storage, settings),
            auth=AuthService(repo, hasher, issuer, settings),
            movies=MovieService(repo, storage, search, settings),
            serieses=SeriesService(repo, storage, search, settings),
            episodes=EpisodeService(repo, settings),
            watchlist=WatchlistService(repo, settings),
        )

    @classmethod
    async def create(cls, settings: Settings | None = None) -> Application:
        """Configure logging, open the database and build the services."""
        settings = settings or get_settings()
        setup_logging(settings)
        await init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            echo=settings.database_echo,
        )
        logger.info("application_started", environment=settings.environment, version=settings.app_version)
        return cls.from_session_factory(settings, get_session_factory())

    async def close(self) -> None:
        await close_db()
        logger.info("application_stopped")


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncGenerator[Application, None]:
    """Startup and shutdown lifecycle."""
    app = await Application.create(settings)
    try:
        yield app
    finally:
        await app.close()
