"""Watchlist accessors and the list/count agreement."""

from __future__ import annotations

import pytest

from fakes import make_episode
from wls.db.models import Film, Series, User
from wls.repo import RepositoryTx
from wls.repo.errors import NoRecordError
from wls.repo.query import WatchedFilter, WatchlistOptions


async def _page_all(repo: RepositoryTx, user_id: int, watched: WatchedFilter, limit: int = 2) -> list[int]:
    film_ids: list[int] = []
    offset = 0
    while True:
        page = await repo.watchlist_get(user_id, WatchlistOptions(offset=offset, limit=limit, watched=watched))
        if not page:
            return film_ids
        film_ids.extend(item.film_id for item in page)
        offset += limit


class TestWatchlistStore:
    async def test_add_then_get_joins_film(self, repo: RepositoryTx, user: User, movie: Film):
        watch_id = await repo.watchlist_add(user.id, movie.id)
        items = await repo.watchlist_get(user.id, WatchlistOptions())
        assert len(items) == 1
        assert items[0].id == watch_id
        assert items[0].film.title == "Arrival"
        assert items[0].time_watched is None

    async def test_set_watched_keeps_first_time(self, repo: RepositoryTx, user: User, movie: Film):
        watch_id = await repo.watchlist_add(user.id, movie.id)
        await repo.watchlist_set_watched(user.id, watch_id)
        first = (await repo.watchlist_get(user.id, WatchlistOptions()))[0].time_watched
        await repo.watchlist_set_watched(user.id, watch_id)
        second = (await repo.watchlist_get(user.id, WatchlistOptions()))[0].time_watched
        assert first is not None
        assert second == first

    async def test_mutations_are_scoped_to_owner(
        self, repo: RepositoryTx, user: User, other_user: User, movie: Film
    ):
        watch_id = await repo.watchlist_add(user.id, movie.id)
        with pytest.raises(NoRecordError):
            await repo.watchlist_set_watched(other_user.id, watch_id)
        with pytest.raises(NoRecordError):
            await repo.watchlist_delete(other_user.id, watch_id)
        assert await repo.watchlist_count(user.id) == 1

    async def test_delete_removes_entry(self, repo: RepositoryTx, user: User, movie: Film):
        watch_id = await repo.watchlist_add(user.id, movie.id)
        await repo.watchlist_delete(user.id, watch_id)
        assert await repo.watchlist_count(user.id) == 0
        with pytest.raises(NoRecordError):
            await repo.watchlist_delete(user.id, watch_id)

    async def test_deleting_user_cascades_to_watchlist(self, repo: RepositoryTx, other_user: User, movie: Film):
        await repo.watchlist_add(other_user.id, movie.id)
        await repo.user_delete(other_user.id)
        assert await repo.watchlist_count(other_user.id) == 0


class TestCountMatchesPaging:
    @pytest.fixture
    async def mixed_watchlist(self, repo: RepositoryTx, user: User, other_user: User, series: Series) -> None:
        for number in range(1, 6):
            film = await repo.episode_put(series.id, 1, number, user.id, make_episode(f"E{number}"))
            watch_id = await repo.watchlist_add(user.id, film.id)
            if number % 2 == 0:
                await repo.watchlist_set_watched(user.id, watch_id)
            await repo.watchlist_add(other_user.id, film.id)

    @pytest.mark.parametrize("watched", list(WatchedFilter))
    async def test_count_equals_paged_total(
        self, repo: RepositoryTx, user: User, mixed_watchlist, watched: WatchedFilter
    ):
        paged = await _page_all(repo, user.id, watched)
        assert await repo.watchlist_count(user.id, watched) == len(paged)

    async def test_filters_partition_the_list(self, repo: RepositoryTx, user: User, mixed_watchlist):
        assert await repo.watchlist_count(user.id, WatchedFilter.ALL) == 5
        assert await repo.watchlist_count(user.id, WatchedFilter.WATCHED) == 2
        assert await repo.watchlist_count(user.id, WatchedFilter.UNWATCHED) == 3

    async def test_sorted_by_time_added(self, repo: RepositoryTx, user: User, mixed_watchlist):
        newest_first = await repo.watchlist_get(user.id, WatchlistOptions(sort_order="desc"))
        oldest_first = await repo.watchlist_get(user.id, WatchlistOptions(sort_order="asc"))
        assert [i.id for i in newest_first] == [i.id for i in reversed(oldest_first)]
