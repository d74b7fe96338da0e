"""Integration tests for authorization gates.

These tests verify the gate decorators on routes including:
- require_permission
- require_any_permission
- require_all_permissions
- require_role
- fail-closed behaviour when the store cannot answer
"""

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.api.dependencies import DBSession
from rbac_api.core.auth.dependencies import CurrentUser
from rbac_api.core.errors import PersistenceError
from rbac_api.core.permissions import (
    AssignmentLedger,
    GrantLedger,
    PermissionCatalog,
    PermissionResolver,
    RoleRegistry,
    require_all_permissions,
    require_any_permission,
    require_permission,
    require_role,
)
from rbac_api.core.permissions.models import Role
from rbac_api.modules.users.models import User
from tests.factories.user import bearer_headers


pytestmark = pytest.mark.integration


# Create a test router with protected endpoints
test_router = APIRouter()

calls: list[str] = []


@test_router.get("/protected-single")
@require_permission("resource", "read")
async def protected_single(current_user: CurrentUser, db: DBSession):
    """Endpoint requiring single permission."""
    calls.append("single")
    return {"status": "ok", "user_id": str(current_user.id)}


@test_router.get("/protected-any")
@require_any_permission([("resource", "read"), ("resource", "write")])
async def protected_any(current_user: CurrentUser, db: DBSession):
    """Endpoint requiring any of the permissions."""
    return {"status": "ok", "user_id": str(current_user.id)}


@test_router.get("/protected-all")
@require_all_permissions([("resource", "read"), ("resource", "write")])
async def protected_all(current_user: CurrentUser, db: DBSession):
    """Endpoint requiring all permissions."""
    return {"status": "ok", "user_id": str(current_user.id)}


@test_router.get("/protected-role")
@require_role("reviewer")
async def protected_role(current_user: CurrentUser, db: DBSession):
    """Endpoint requiring a role."""
    return {"status": "ok", "user_id": str(current_user.id)}


class TestPermissionDecorators:
    """Tests for gate decorators on routes."""

    @pytest.fixture
    async def test_app(self, app):
        """Add test router to app."""
        app.include_router(test_router, prefix="/test")
        calls.clear()
        return app

    @pytest.fixture
    async def test_client(self, test_app) -> AsyncClient:
        """Create test client for the app."""
        async with AsyncClient(
            transport=ASGITransport(app=test_app),
            base_url="http://test",
        ) as client:
            yield client

    @pytest.fixture
    async def reader(self, db: AsyncSession) -> Role:
        """Create a role granted resource:read only."""
        role = await RoleRegistry(db).create_role("reader")
        permission = await PermissionCatalog(db).create_permission(
            "Read resource", "resource", "read"
        )
        await GrantLedger(db).grant(role.id, permission.id)
        return role

    @pytest.fixture
    async def editor(self, db: AsyncSession, reader: Role) -> Role:
        """Create a role granted resource:read and resource:write."""
        role = await RoleRegistry(db).create_role("editor")
        catalog = PermissionCatalog(db)
        grants = GrantLedger(db)
        for action in ("read", "write"):
            permission = await catalog.create_permission(
                f"{action.title()} resource", "resource", action
            )
            await grants.grant(role.id, permission.id)
        return role

    async def _assign(self, db: AsyncSession, user: User, role: Role) -> None:
        await AssignmentLedger(db).assign_role(user.id, role.id)

    async def test_missing_token_is_unauthorized(self, test_client: AsyncClient):
        response = await test_client.get("/test/protected-single")

        assert response.status_code == 401

    async def test_invalid_token_is_unauthorized(self, test_client: AsyncClient):
        response = await test_client.get(
            "/test/protected-single",
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    async def test_single_denied_without_roles(
        self, test_client: AsyncClient, user: User
    ):
        response = await test_client.get(
            "/test/protected-single", headers=bearer_headers(user)
        )

        assert response.status_code == 403
        data = response.json()
        assert data["type"].endswith("/permission_denied")
        assert data["required"] == ["resource:read"]
        assert calls == []

    async def test_single_allowed(
        self, test_client: AsyncClient, db: AsyncSession, user: User, reader: Role
    ):
        await self._assign(db, user, reader)

        response = await test_client.get(
            "/test/protected-single", headers=bearer_headers(user)
        )

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "user_id": str(user.id)}
        assert calls == ["single"]

    async def test_any_allowed_with_one(
        self, test_client: AsyncClient, db: AsyncSession, user: User, reader: Role
    ):
        await self._assign(db, user, reader)

        response = await test_client.get(
            "/test/protected-any", headers=bearer_headers(user)
        )

        assert response.status_code == 200

    async def test_any_denied_without_roles(
        self, test_client: AsyncClient, user: User
    ):
        response = await test_client.get(
            "/test/protected-any", headers=bearer_headers(user)
        )

        assert response.status_code == 403

    async def test_all_denied_with_partial(
        self, test_client: AsyncClient, db: AsyncSession, user: User, reader: Role
    ):
        await self._assign(db, user, reader)

        response = await test_client.get(
            "/test/protected-all", headers=bearer_headers(user)
        )

        assert response.status_code == 403
        assert response.json()["required"] == ["resource:read", "resource:write"]

    async def test_all_allowed_with_every_permission(
        self, test_client: AsyncClient, db: AsyncSession, user: User, editor: Role
    ):
        await self._assign(db, user, editor)

        response = await test_client.get(
            "/test/protected-all", headers=bearer_headers(user)
        )

        assert response.status_code == 200

    async def test_role_gate(
        self, test_client: AsyncClient, db: AsyncSession, user: User
    ):
        response = await test_client.get(
            "/test/protected-role", headers=bearer_headers(user)
        )
        assert response.status_code == 403
        assert response.json()["type"].endswith("/role_required")

        role = await RoleRegistry(db).create_role("reviewer")
        await self._assign(db, user, role)

        response = await test_client.get(
            "/test/protected-role", headers=bearer_headers(user)
        )
        assert response.status_code == 200

    async def test_storage_fault_fails_closed(
        self,
        test_client: AsyncClient,
        db: AsyncSession,
        user: User,
        reader: Role,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """A fault while resolving is a 503, not a 403, and the handler never runs."""
        await self._assign(db, user, reader)

        async def broken(self, user_id, resource, action):
            raise PersistenceError(operation="has_permission")

        monkeypatch.setattr(PermissionResolver, "has_permission", broken)

        response = await test_client.get(
            "/test/protected-single", headers=bearer_headers(user)
        )

        assert response.status_code == 503
        data = response.json()
        assert data["type"].endswith("/authorization_undetermined")
        assert data["operation"] == "authorize"
        assert data["required"] == ["resource:read"]
        assert calls == []
