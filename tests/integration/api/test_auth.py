"""Integration tests for the authentication endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.core.permissions import AssignmentLedger, RoleRegistry
from rbac_api.modules.users.models import User
from tests.factories.user import DEFAULT_PASSWORD, bearer_headers


pytestmark = pytest.mark.integration


class TestRegister:
    """Tests for POST /api/v1/auth/register."""

    async def test_register(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "alice@example.com",
                "password": "s3cret-pass",
                "full_name": "Alice",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "alice@example.com"
        assert data["user"]["is_active"] is True
        assert "password_hash" not in data["user"]
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 24 * 60 * 60
        assert data["access_token"]

    async def test_register_with_role(self, client: AsyncClient, db: AsyncSession):
        role = await RoleRegistry(db).create_role("student")

        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "bob@example.com",
                "password": "s3cret-pass",
                "full_name": "Bob",
                "role_id": str(role.id),
            },
        )

        assert response.status_code == 201
        user_id = response.json()["user"]["id"]
        roles = await client.get(
            f"/api/v1/users/{user_id}/roles",
            headers={"Authorization": f"Bearer {response.json()['access_token']}"},
        )
        assert [r["name"] for r in roles.json()] == ["student"]

    async def test_register_with_unknown_role(
        self, client: AsyncClient, db: AsyncSession
    ):
        """The user is not created when the initial role does not exist."""
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "carol@example.com",
                "password": "s3cret-pass",
                "full_name": "Carol",
                "role_id": "00000000-0000-0000-0000-000000000000",
            },
        )

        assert response.status_code == 404
        count = await db.scalar(
            select(func.count())
            .select_from(User)
            .where(User.email == "carol@example.com")
        )
        assert count == 0

    async def test_register_duplicate_email(self, client: AsyncClient, user: User):
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": user.email,
                "password": "s3cret-pass",
                "full_name": "Duplicate",
            },
        )

        assert response.status_code == 409

    async def test_register_validation(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={"email": "not-an-email", "password": "x", "full_name": ""},
        )

        assert response.status_code == 422
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"email", "password", "full_name"} <= fields

    async def test_register_invalid_role_id(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/register",
            json={
                "email": "dave@example.com",
                "password": "s3cret-pass",
                "full_name": "Dave",
                "role_id": "not-a-uuid",
            },
        )

        assert response.status_code == 422


class TestLogin:
    """Tests for POST /api/v1/auth/login."""

    async def test_login(self, client: AsyncClient, db: AsyncSession, user: User):
        role = await RoleRegistry(db).create_role("teacher")
        await AssignmentLedger(db).assign_role(user.id, role.id)

        response = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == str(user.id)
        assert [r["name"] for r in data["roles"]] == ["teacher"]
        assert data["access_token"]

    async def test_login_wrong_password(self, client: AsyncClient, user: User):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["type"].endswith("/invalid_credentials")

    async def test_login_token_works(self, client: AsyncClient, user: User):
        login = await client.post(
            "/api/v1/auth/login",
            json={"email": user.email, "password": DEFAULT_PASSWORD},
        )
        token = login.json()["access_token"]

        response = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert response.json()["email"] == user.email


class TestMe:
    """Tests for GET /api/v1/auth/me."""

    async def test_me(self, client: AsyncClient, user: User):
        response = await client.get("/api/v1/auth/me", headers=bearer_headers(user))

        assert response.status_code == 200
        assert response.json()["id"] == str(user.id)

    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["type"].endswith("/missing_token")

    async def test_me_inactive_user(
        self, client: AsyncClient, db: AsyncSession, user: User
    ):
        user.is_active = False
        await db.flush()

        response = await client.get("/api/v1/auth/me", headers=bearer_headers(user))

        assert response.status_code == 403
