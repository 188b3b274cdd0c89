"""
Movie and series search.

:class:`DatabaseSearch` matches the query case-insensitively as a substring
of the title or the description, ranking title matches first.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Any, Protocol

from sqlalchemy import ColumnElement, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wls.config import Settings
from wls.db.models import Film, Series
from wls.repo.movies import is_movie
from wls.repo.query import SearchOptions


class SearchProvider(Protocol):
    async def search_movies(self, options: SearchOptions) -> tuple[Sequence[Film], int]: ...

    async def search_serieses(self, options: SearchOptions) -> tuple[Sequence[Series], int]: ...


class InvalidSearchQueryError(ValueError):
    """Raised when a search query is shorter or longer than allowed."""


def check_query(options: SearchOptions, settings: Settings) -> SearchOptions:
    """Return ``options`` with the query stripped, or raise if its length is out of bounds."""
    query = options.query.strip()
    if not settings.search_query_min_length <= len(query) <= settings.search_query_max_length:
        msg = (
            f"Search query must be {settings.search_query_min_length}"
            f"-{settings.search_query_max_length} characters"
        )
        raise InvalidSearchQueryError(msg)
    return replace(options, query=query)


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.lower()}%"


class DatabaseSearch:
    """Search over the catalog tables themselves."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def search_movies(self, options: SearchOptions) -> tuple[Sequence[Film], int]:
        return await self._search(Film, options, is_movie(Film))

    async def search_serieses(self, options: SearchOptions) -> tuple[Sequence[Series], int]:
        return await self._search(Series, options)

    async def _search(
        self,
        model: type[Film] | type[Series],
        options: SearchOptions,
        *scope: ColumnElement[bool],
    ) -> tuple[Sequence[Any], int]:
        pattern = _like_pattern(options.query)
        in_title = func.lower(model.title).like(pattern, escape="\\")
        in_description = func.lower(model.description).like(pattern, escape="\\")
        conditions = (*scope, or_(in_title, in_description))

        hits_stmt = (
            select(model)
            .where(*conditions)
            .order_by(case((in_title, 0), else_=1), model.id)
            .offset(options.offset)
            .limit(options.size)
        )
        total_stmt = select(func.count()).select_from(model).where(*conditions)

        async with self.session_factory() as db:
            hits = (await db.execute(hits_stmt)).scalars().all()
            total = (await db.execute(total_stmt)).scalar_one()
        return hits, total
