"""Shared plumbing for the entity store mixins."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, TypeVar

from sqlalchemy import Select
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncSession

from wls.repo.errors import NoRecordError

T = TypeVar("T")


class StoreBase:
    """Gives every store method a session to run on.

    A store bound to a transaction hands out that transaction's session.
    The root store opens a short-lived session per call and commits it when
    the call returns.
    """

    def _session(self) -> AbstractAsyncContextManager[AsyncSession]:
        raise NotImplementedError


async def one_or_raise(db: AsyncSession, stmt: Select[tuple[T]], what: str) -> T:
    """Execute ``stmt`` and return its single row's entity, or raise NoRecordError."""
    row = (await db.execute(stmt)).scalar_one_or_none()
    if row is None:
        msg = f"{what} not found"
        raise NoRecordError(msg)
    return row


def affected_or_raise(result: Result[Any], what: str) -> int:
    """Return the number of affected rows, raising NoRecordError when zero."""
    rowcount: int = result.rowcount  # type: ignore[attr-defined]
    if rowcount == 0:
        msg = f"{what} not found"
        raise NoRecordError(msg)
    return rowcount
