"""Statement helpers shared by the repositories and ledgers.

- ``insert_ignore``: idempotent insert of a relationship row
- ``storage_guard``: translate SQLAlchemy faults into ``PersistenceError``
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import and_, exists, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.core.errors import PersistenceError


logger = structlog.get_logger()


async def insert_ignore(
    session: AsyncSession,
    target: Any,
    values: dict[str, Any],
) -> int:
    """Insert a row unless one with the same key already exists.

    Uses ``ON CONFLICT DO NOTHING`` on PostgreSQL and SQLite so that two
    concurrent callers inserting the same pair both succeed. Other
    dialects fall back to a check-then-insert.

    Args:
        session: Database session
        target: Mapped class or Table to insert into
        values: Column values for the new row

    Returns:
        Number of rows inserted (0 when the row already existed)
    """
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = postgresql.insert(target).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite.insert(target).values(**values).on_conflict_do_nothing()
    else:
        table = getattr(target, "__table__", target)
        clause = and_(*(table.c[key] == value for key, value in values.items()))
        already = await session.scalar(select(exists().where(clause)))
        if already:
            return 0
        stmt = insert(target).values(**values)

    result = await session.execute(stmt)
    return result.rowcount or 0


@asynccontextmanager
async def storage_guard(operation: str) -> AsyncIterator[None]:
    """Re-raise any storage fault inside the block as ``PersistenceError``.

    Application errors raised inside the block pass through untouched.

    Usage:
        async with storage_guard("list_roles"):
            result = await self.session.execute(stmt)
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(
            "persistence_failed",
            operation=operation,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise PersistenceError(operation=operation) from exc
