"""Episode operations through the service layer."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from wls.app import Application
from wls.catalog.schemas import (
    EpisodePutRequest,
    EpisodesPutAllBySeasonRequest,
    EpisodeUpdateRequest,
    InvalidationRequest,
)
from wls.db.models import Series, User
from wls.errors import NotFoundError
from wls.repo import RepositoryTx
from wls.repo.query import SortOrderOptions


def _req(title: str, day: int = 1) -> EpisodePutRequest:
    return EpisodePutRequest(title=title, date_released=date(2017, 12, day), duration=50)


class TestEpisodePut:
    async def test_put_requires_series(self, app: Application, repo: RepositoryTx, user: User):
        with pytest.raises(NotFoundError):
            await app.episodes.put(9999, 1, 1, user.id, _req("Orphan"))
        assert await repo.episodes_count_by_series(9999) == 0

    async def test_put_then_replace(self, app: Application, series: Series, user: User, other_user: User):
        first_id = await app.episodes.put(series.id, 1, 1, user.id, _req("Secrets"))
        second_id = await app.episodes.put(series.id, 1, 1, other_user.id, _req("Lies"))
        assert first_id == second_id

        episode = await app.episodes.get(series.id, 1, 1)
        assert episode.title == "Lies"
        assert episode.contributed_by == other_user.id
        audits, total = await app.episodes.audits_get_all(series.id, 1, 1, SortOrderOptions())
        assert total == 1
        assert audits[0].title == "Secrets"


class TestSeasonPut:
    async def test_positions_become_episode_numbers(self, app: Application, series: Series, user: User):
        req = EpisodesPutAllBySeasonRequest(episodes=[_req("One"), _req("Two", 8), _req("Three", 15)])
        await app.episodes.put_all_by_season(series.id, 1, user.id, req)

        episodes, total = await app.episodes.get_all_by_season(series.id, 1, SortOrderOptions(sort_order="asc"))
        assert total == 3
        assert [(e.episode_number, e.title) for e in episodes] == [(1, "One"), (2, "Two"), (3, "Three")]

    async def test_batch_is_all_or_nothing(
        self, app: Application, repo: RepositoryTx, series: Series, user: User, monkeypatch: pytest.MonkeyPatch
    ):
        await app.episodes.put_all_by_season(
            series.id, 1, user.id, EpisodesPutAllBySeasonRequest(episodes=[_req("Old 1"), _req("Old 2")])
        )

        # The third put of the replacement batch fails after two have been written
        original_put = RepositoryTx.episode_put
        calls = 0

        async def failing_put(self, series_id, season, episode, contributor_id, values):  # type: ignore[no-untyped-def]
            nonlocal calls
            calls += 1
            if calls == 3:
                msg = "storage hiccup"
                raise IntegrityError("INSERT", {}, Exception(msg))
            return await original_put(self, series_id, season, episode, contributor_id, values)

        monkeypatch.setattr("wls.repo.repository.Store.episode_put", failing_put)
        req = EpisodesPutAllBySeasonRequest(episodes=[_req("New 1"), _req("New 2"), _req("New 3")])
        with pytest.raises(IntegrityError):
            await app.episodes.put_all_by_season(series.id, 1, user.id, req)
        monkeypatch.undo()

        episodes, total = await app.episodes.get_all_by_season(series.id, 1, SortOrderOptions(sort_order="asc"))
        assert total == 2
        assert [e.title for e in episodes] == ["Old 1", "Old 2"]
        assert await repo.episode_audits_count(series.id, 1, 1) == 0

    async def test_season_put_requires_series(self, app: Application, user: User):
        with pytest.raises(NotFoundError):
            await app.episodes.put_all_by_season(9999, 1, user.id, EpisodesPutAllBySeasonRequest(episodes=[_req("x")]))


class TestEpisodeQueries:
    async def test_listing_requires_series(self, app: Application):
        with pytest.raises(NotFoundError):
            await app.episodes.get_all_by_series(9999, SortOrderOptions())
        with pytest.raises(NotFoundError):
            await app.episodes.get_all_by_season(9999, 1, SortOrderOptions())

    async def test_get_all_by_series(self, app: Application, series: Series, user: User):
        await app.episodes.put(series.id, 2, 1, user.id, _req("S2E1"))
        await app.episodes.put(series.id, 1, 1, user.id, _req("S1E1"))
        episodes, total = await app.episodes.get_all_by_series(series.id, SortOrderOptions(sort_order="asc"))
        assert total == 2
        assert [e.title for e in episodes] == ["S1E1", "S2E1"]

    async def test_missing_episode(self, app: Application, series: Series, user: User):
        with pytest.raises(NotFoundError):
            await app.episodes.get(series.id, 1, 1)
        with pytest.raises(NotFoundError):
            await app.episodes.audits_get_all(series.id, 1, 1, SortOrderOptions())


class TestEpisodeEdits:
    async def test_update_is_audited(self, app: Application, series: Series, user: User):
        await app.episodes.put(series.id, 1, 1, user.id, _req("Secrets"))
        await app.episodes.update(series.id, 1, 1, user.id, EpisodeUpdateRequest(duration=51))

        assert (await app.episodes.get(series.id, 1, 1)).duration == 51
        audits, _ = await app.episodes.audits_get_all(series.id, 1, 1, SortOrderOptions())
        assert [a.duration for a in audits] == [50]

    async def test_update_missing(self, app: Application, series: Series, user: User):
        with pytest.raises(NotFoundError):
            await app.episodes.update(series.id, 1, 1, user.id, EpisodeUpdateRequest(duration=51))

    async def test_invalidate_one(self, app: Application, series: Series, user: User):
        await app.episodes.put(series.id, 1, 1, user.id, _req("Secrets"))
        await app.episodes.invalidate(series.id, 1, 1, user.id, InvalidationRequest(invalidation="Wrong title"))
        assert (await app.episodes.get(series.id, 1, 1)).invalidation == "Wrong title"
        with pytest.raises(NotFoundError):
            await app.episodes.invalidate(series.id, 1, 2, user.id, InvalidationRequest(invalidation="x"))

    async def test_invalidate_season(self, app: Application, series: Series, user: User):
        await app.episodes.put_all_by_season(
            series.id, 1, user.id, EpisodesPutAllBySeasonRequest(episodes=[_req("A"), _req("B")])
        )
        await app.episodes.invalidate_all_by_season(series.id, 1, user.id, InvalidationRequest(invalidation="Recut"))
        episodes, _ = await app.episodes.get_all_by_season(series.id, 1, SortOrderOptions())
        assert {e.invalidation for e in episodes} == {"Recut"}

    async def test_invalidate_empty_season(self, app: Application, series: Series, user: User):
        with pytest.raises(NotFoundError):
            await app.episodes.invalidate_all_by_season(series.id, 7, user.id, InvalidationRequest(invalidation="x"))
