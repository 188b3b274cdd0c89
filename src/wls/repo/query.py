"""Listing options and the watchlist query builder."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from sqlalchemy import ColumnElement, Select, func, select, true
from sqlalchemy.orm import InstrumentedAttribute

from wls.db.base import Base
from wls.db.models import Film, WatchFilm

SortOrder = Literal["asc", "desc"]


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SortOrderOptions:
    """Offset pagination with a fixed sort column and a caller-chosen direction."""

    offset: int = 0
    limit: int = 20
    sort_order: SortOrder = "desc"

    def __post_init__(self) -> None:
        if self.offset < 0 or self.limit < 0:
            msg = "offset and limit must not be negative"
            raise ValueError(msg)
        if self.sort_order not in ("asc", "desc"):
            msg = f"Invalid sort order: {self.sort_order!r}"
            raise ValueError(msg)


@dataclass(frozen=True)
class ListOptions(SortOrderOptions):
    """Offset pagination sorted by a caller-chosen column."""

    sort_field: str = "id"

    def order_by(self, model: type[Base]) -> ColumnElement[Any]:
        """Resolve ``sort_field`` against the model's table.

        Raises:
            ValueError: If the model has no such column.
        """
        if self.sort_field not in model.__table__.columns:
            msg = f"Invalid sort field for {model.__tablename__}: {self.sort_field!r}"
            raise ValueError(msg)
        return ordered(getattr(model, self.sort_field), self.sort_order)


@dataclass(frozen=True)
class SearchOptions:
    query: str
    offset: int = 0
    size: int = 20


def ordered(column: InstrumentedAttribute[Any], sort_order: SortOrder) -> ColumnElement[Any]:
    return column.desc() if sort_order == "desc" else column.asc()


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------


class WatchedFilter(enum.Enum):
    """Which watchlist entries a listing selects."""

    ALL = "all"
    UNWATCHED = "unwatched"
    WATCHED = "watched"

    def criterion(self) -> ColumnElement[bool]:
        """The predicate fragment this filter adds to the owner filter."""
        if self is WatchedFilter.UNWATCHED:
            return WatchFilm.time_watched.is_(None)
        if self is WatchedFilter.WATCHED:
            return WatchFilm.time_watched.is_not(None)
        return true()


@dataclass(frozen=True)
class WatchlistOptions(SortOrderOptions):
    """Pagination over a user's watchlist, sorted by time added."""

    watched: WatchedFilter = WatchedFilter.ALL


@dataclass(frozen=True)
class WatchlistItem:
    """A watchlist entry joined with the film it references."""

    id: int
    user_id: int
    film_id: int
    time_added: datetime
    time_watched: datetime | None
    film: Film

    @classmethod
    def from_row(cls, entry: WatchFilm, film: Film) -> WatchlistItem:
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            film_id=entry.film_id,
            time_added=entry.time_added,
            time_watched=entry.time_watched,
            film=film,
        )


def build_watchlist_queries(
    user_id: int,
    options: WatchlistOptions,
) -> tuple[Select[tuple[WatchFilm, Film]], Select[tuple[int]]]:
    """Build the page query and the matching count query for a user's watchlist.

    Both statements share the same join and the same filter, so the count is
    always the number of rows obtainable by paging the list to exhaustion.
    """
    conditions = (WatchFilm.user_id == user_id, options.watched.criterion())

    list_stmt = (
        select(WatchFilm, Film)
        .join(Film, WatchFilm.film_id == Film.id)
        .where(*conditions)
        .order_by(
            ordered(WatchFilm.time_added, options.sort_order),
            ordered(WatchFilm.id, options.sort_order),
        )
        .offset(options.offset)
        .limit(options.limit)
    )
    count_stmt = (
        select(func.count())
        .select_from(WatchFilm)
        .join(Film, WatchFilm.film_id == Film.id)
        .where(*conditions)
    )
    return list_stmt, count_stmt
