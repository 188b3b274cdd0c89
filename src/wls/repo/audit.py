"""Archive-before-overwrite for catalog rows.

Every overwrite of an existing film or series row goes through
:func:`overwrite`: the row is copied verbatim into its audit table, then the
new values are applied and the row is re-attributed to the acting
contributor. Both writes are flushed on the caller's session, so they
commit or roll back together.

Invalidation is not an overwrite and does not pass through here.
"""

from __future__ import annotations

from typing import Any, TypeVar

import structlog
from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from wls.db.models import Film, FilmAudit, Series, SeriesAudit, utcnow

logger = structlog.get_logger()

Row = TypeVar("Row", Film, Series)

AUDIT_TABLES: dict[type[Film] | type[Series], type[FilmAudit] | type[SeriesAudit]] = {
    Film: FilmAudit,
    Series: SeriesAudit,
}


async def lock_current(db: AsyncSession, stmt: Select[tuple[Row]]) -> Row | None:
    """Load the row about to be overwritten, locking it until the transaction ends."""
    result = await db.execute(stmt.with_for_update().execution_options(populate_existing=True))
    return result.scalar_one_or_none()


def snapshot(row: Film | Series) -> FilmAudit | SeriesAudit:
    """Copy every column of ``row`` into a new audit record."""
    audit_cls = AUDIT_TABLES[type(row)]
    return audit_cls(**{name: getattr(row, name) for name in audit_cls.__table__.columns.keys()})


async def overwrite(
    db: AsyncSession,
    row: Row,
    contributor_id: int,
    values: dict[str, Any],
) -> Row:
    """Archive ``row`` as it is now, then apply ``values`` to it."""
    db.add(snapshot(row))
    await db.flush()

    for name, value in values.items():
        setattr(row, name, value)
    row.contributed_by = contributor_id
    row.contributed_at = utcnow()
    # A new version starts undisputed
    row.invalidation = None
    await db.flush()

    logger.debug(
        "row_archived",
        table=row.__tablename__,
        id=row.id,
        contributor_id=contributor_id,
        columns=sorted(values),
    )
    return row
