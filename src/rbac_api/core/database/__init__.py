"""Database layer - session management, base models, and statement helpers."""

from rbac_api.core.database.base import Base, TimestampMixin, UUIDMixin
from rbac_api.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)
from rbac_api.core.database.statements import insert_ignore, storage_guard


__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
    "insert_ignore",
    "storage_guard",
]
