"""Transaction coordinator.

:class:`RepositoryTx` is the root store. Called directly, each accessor runs
in its own short session that commits on return. :meth:`RepositoryTx.transaction`
scopes a group of accessor calls to one database transaction: it commits
when the body returns and rolls back when anything at all is raised out of
it, including cancellation, before re-raising the same exception.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wls.repo.repository import Repository, Store

logger = structlog.get_logger()

T = TypeVar("T")


class RepositoryTx(Store):
    """Entity store over a session factory, able to open transactions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as db, db.begin():
            yield db

    @asynccontextmanager
    async def transaction(self, isolation_level: str | None = None) -> AsyncIterator[Repository]:
        """Open one transaction and yield a store bound to it.

        Args:
            isolation_level: Applied to the transaction's connection before any
                statement runs. None keeps the engine default.
        """
        async with self.session_factory() as db:
            try:
                async with db.begin():
                    if isolation_level is not None:
                        await db.connection(execution_options={"isolation_level": isolation_level})
                    yield Repository(db)
            except BaseException as exc:
                logger.debug("transaction_rolled_back", error=type(exc).__name__)
                raise

    async def run_in_transaction(
        self,
        work: Callable[[Repository], Awaitable[T]],
        *,
        isolation_level: str | None = None,
    ) -> T:
        """Await ``work`` with a transaction-scoped store and return its result."""
        async with self.transaction(isolation_level) as tx:
            return await work(tx)
