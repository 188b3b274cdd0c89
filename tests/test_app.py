"""Settings, logging and application wiring."""

from __future__ import annotations

import logging

import pytest

from wls.app import Application, lifespan
from wls.auth.service import AuthService
from wls.config import Settings, get_settings
from wls.database import get_engine
from wls.logging_setup import setup_logging
from wls.repo import RepositoryTx
from wls.search.provider import DatabaseSearch
from wls.storage.blob import LocalBlobStorage


class TestSettings:
    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("WLS_SEARCH_QUERY_MIN_LENGTH", "3")
        monkeypatch.setenv("WLS_TRANSACTION_ISOLATION_LEVEL", "REPEATABLE READ")
        settings = Settings()
        assert settings.search_query_min_length == 3
        assert settings.transaction_isolation_level == "REPEATABLE READ"

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()


class TestLogging:
    def test_sql_logging_follows_echo(self):
        setup_logging(Settings(database_echo=True, log_format="console"))
        assert logging.getLogger("sqlalchemy.engine").level == logging.INFO
        setup_logging(Settings(database_echo=False, log_format="console"))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestApplication:
    def test_default_collaborators_come_from_settings(self, settings: Settings, session_factory):
        app = Application.from_session_factory(settings, session_factory)
        assert isinstance(app.repo, RepositoryTx)
        assert isinstance(app.auth, AuthService)
        assert isinstance(app.movies.storage, LocalBlobStorage)
        assert isinstance(app.serieses.search_provider, DatabaseSearch)

    async def test_lifespan_opens_and_closes_database(self, settings: Settings):
        async with lifespan(settings) as app:
            assert get_engine() is not None
            assert app.settings is settings
        with pytest.raises(RuntimeError, match="not initialized"):
            get_engine()
