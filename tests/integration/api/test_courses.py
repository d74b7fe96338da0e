"""Integration tests for the permission-gated sample endpoints."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_api.core.errors import PersistenceError
from rbac_api.core.permissions import (
    AssignmentLedger,
    GrantLedger,
    PermissionCatalog,
    PermissionResolver,
    RoleRegistry,
)
from rbac_api.modules.users.models import User


pytestmark = pytest.mark.integration


class TestCourseRoutes:
    """Course and grades endpoints answer only with the matching grant."""

    @pytest.fixture
    async def student(self, db: AsyncSession, user: User):
        """Give ``user`` a student role granted course:read only."""
        role = await RoleRegistry(db).create_role("student")
        permission = await PermissionCatalog(db).create_permission(
            "Read course", "course", "read"
        )
        await GrantLedger(db).grant(role.id, permission.id)
        await AssignmentLedger(db).assign_role(user.id, role.id)
        return role

    async def test_list_courses_allowed(
        self, client: AsyncClient, auth_headers: dict, student
    ):
        response = await client.get("/api/v1/courses", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Course list"}

    async def test_create_course_denied(
        self, client: AsyncClient, auth_headers: dict, student
    ):
        """course:read does not imply course:create."""
        response = await client.post("/api/v1/courses", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["required"] == ["course:create"]

    async def test_grades_denied(
        self, client: AsyncClient, auth_headers: dict, student
    ):
        response = await client.get("/api/v1/grades", headers=auth_headers)

        assert response.status_code == 403

    async def test_grades_allowed_after_grant(
        self, client: AsyncClient, db: AsyncSession, auth_headers: dict, student
    ):
        permission = await PermissionCatalog(db).create_permission(
            "Read grades", "grades", "read"
        )
        await GrantLedger(db).grant(student.id, permission.id)

        response = await client.get("/api/v1/grades", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Grades list"}

    async def test_no_roles_denied(self, client: AsyncClient, auth_headers: dict):
        response = await client.get("/api/v1/courses", headers=auth_headers)

        assert response.status_code == 403


class TestRequestLog:
    """The request log carries the gate outcome for gated routes."""

    @pytest.fixture
    def request_log(self, monkeypatch: pytest.MonkeyPatch) -> MagicMock:
        log = MagicMock()
        monkeypatch.setattr("rbac_api.core.logging.middleware.logger", log)
        return log

    @pytest.fixture
    async def reader(self, db: AsyncSession, user: User):
        role = await RoleRegistry(db).create_role("student")
        permission = await PermissionCatalog(db).create_permission(
            "Read course", "course", "read"
        )
        await GrantLedger(db).grant(role.id, permission.id)
        await AssignmentLedger(db).assign_role(user.id, role.id)

    async def test_allowed(
        self,
        client: AsyncClient,
        auth_headers: dict,
        user: User,
        reader,
        request_log: MagicMock,
    ):
        response = await client.get("/api/v1/courses", headers=auth_headers)

        assert response.status_code == 200
        request_log.info.assert_called_once()
        assert request_log.info.call_args.args == ("request_completed",)
        fields = request_log.info.call_args.kwargs
        assert fields["authorization"] == "allowed"
        assert fields["required"] == ["course:read"]
        assert fields["user_id"] == str(user.id)
        assert "error_code" not in fields

    async def test_denied(
        self,
        client: AsyncClient,
        auth_headers: dict,
        reader,
        request_log: MagicMock,
    ):
        response = await client.post("/api/v1/courses", headers=auth_headers)

        assert response.status_code == 403
        fields = request_log.warning.call_args.kwargs
        assert fields["status_code"] == 403
        assert fields["authorization"] == "denied"
        assert fields["required"] == ["course:create"]
        assert fields["error_code"] == "permission_denied"

    async def test_undetermined(
        self,
        client: AsyncClient,
        auth_headers: dict,
        request_log: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ):
        async def broken(*args, **kwargs):
            raise PersistenceError(operation="has_permission")

        monkeypatch.setattr(PermissionResolver, "has_permission", broken)

        response = await client.get("/api/v1/grades", headers=auth_headers)

        assert response.status_code == 503
        fields = request_log.error.call_args.kwargs
        assert fields["authorization"] == "undetermined"
        assert fields["error_code"] == "authorization_undetermined"

    async def test_ungated_route_has_no_outcome(
        self, client: AsyncClient, auth_headers: dict, request_log: MagicMock
    ):
        response = await client.get("/api/v1/roles", headers=auth_headers)

        assert response.status_code == 200
        assert "authorization" not in request_log.info.call_args.kwargs
