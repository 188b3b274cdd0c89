"""Shared test fixtures.

Every test gets its own SQLite database file (aiosqlite, foreign keys on)
with the full schema created from the ORM metadata.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterator
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio
import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fakes import TEST_PASSWORD, InMemoryBlobStorage, StaticSearch
from wls.app import Application
from wls.auth.password import Argon2Hasher
from wls.auth.tokens import JwtIssuer
from wls.config import Settings
from wls.database import build_engine, build_session_factory, create_all
from wls.db.models import Film, Series, User
from wls.repo import RepositoryTx


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any structlog configuration a test installed, so log capture sees fresh loggers."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'wls.db'}",
        jwt_secret_key="test-secret-key-" + "x" * 64,
        storage_root=str(tmp_path / "blobs"),
        log_format="console",
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(settings.database_url)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
def repo(session_factory: async_sessionmaker[AsyncSession]) -> RepositoryTx:
    return RepositoryTx(session_factory)


@pytest.fixture
def hasher() -> Argon2Hasher:
    """argon2id with the cheapest parameters the library accepts."""
    return Argon2Hasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def issuer(settings: Settings) -> JwtIssuer:
    return JwtIssuer.from_settings(settings)


@pytest.fixture
def blob_storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def search() -> StaticSearch:
    return StaticSearch()


@pytest.fixture
def app(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    hasher: Argon2Hasher,
    issuer: JwtIssuer,
    blob_storage: InMemoryBlobStorage,
    search: StaticSearch,
) -> Application:
    return Application.from_session_factory(
        settings,
        session_factory,
        hasher=hasher,
        issuer=issuer,
        storage=blob_storage,
        search=search,
    )


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def user(repo: RepositoryTx, hasher: Argon2Hasher) -> User:
    """A registered user whose password is TEST_PASSWORD."""
    return await repo.user_create(User(email="alice@example.com", password_hash=hasher.hash(TEST_PASSWORD)))


@pytest_asyncio.fixture
async def other_user(repo: RepositoryTx, hasher: Argon2Hasher) -> User:
    return await repo.user_create(User(email="bob@example.com", password_hash=hasher.hash(TEST_PASSWORD)))


@pytest_asyncio.fixture
async def movie(repo: RepositoryTx, user: User) -> Film:
    return await repo.movie_create(
        user.id,
        Film(title="Arrival", description="Linguist meets heptapods", date_released=date(2016, 11, 11), duration=116),
    )


@pytest_asyncio.fixture
async def series(repo: RepositoryTx, user: User) -> Series:
    return await repo.series_create(
        user.id,
        Series(title="Dark", description="Winden, 1986/2019", date_started=date(2017, 12, 1)),
    )
