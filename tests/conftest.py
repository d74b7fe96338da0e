"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from rbac_api.core.constants import ADMIN_ROLE_NAME
from rbac_api.core.database import Base, get_db

# Import all models to ensure they're registered with Base.metadata
from rbac_api.core.permissions.models import Permission, Role, UserRole
from rbac_api.main import create_app
from rbac_api.modules.users.models import User
from tests.factories.user import UserFactory, bearer_headers


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """Turn on foreign keys and let SQLAlchemy own BEGIN/SAVEPOINT.

    The sqlite driver otherwise issues its own BEGIN, which breaks nested
    transactions (``session.begin_nested()``).
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine on a throwaway SQLite file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )
    _enable_sqlite_transactions(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a transactional database session for tests.

    Each test runs in its own transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    session_factory = async_sessionmaker(
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with engine.connect() as conn:
        await conn.begin()

        async with session_factory(bind=conn) as session:
            yield session

        await conn.rollback()


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Override database dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# User, Role and Permission Fixtures
# ============================================================


async def persist(db: AsyncSession, instance):
    """Flush an instance and load its server-generated columns."""
    db.add(instance)
    await db.flush()
    await db.refresh(instance)
    return instance


@pytest.fixture
async def user(db: AsyncSession) -> User:
    """Create a test user without any roles.

    Returns:
        A persisted User instance
    """
    return await persist(db, UserFactory.build())


@pytest.fixture
async def admin_role(db: AsyncSession) -> Role:
    """Create the admin role."""
    return await persist(db, Role(name=ADMIN_ROLE_NAME, description="Administrator"))


@pytest.fixture
async def admin_user(db: AsyncSession, admin_role: Role) -> User:
    """Create a user holding the admin role."""
    admin = await persist(db, UserFactory.build(email="admin@example.com"))
    await persist(db, UserRole(user_id=admin.id, role_id=admin_role.id))
    return admin


@pytest.fixture
async def grades_read(db: AsyncSession) -> Permission:
    """Create the grades:read permission."""
    return await persist(
        db, Permission(name="Read grades", resource="grades", action="read")
    )


@pytest.fixture
def auth_headers(user: User) -> dict[str, str]:
    """Generate authorization headers with a valid JWT token for ``user``."""
    return bearer_headers(user)


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    """Generate authorization headers for the admin user."""
    return bearer_headers(admin_user)
