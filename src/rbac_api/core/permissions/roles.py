"""Role registry: creation, lookup and deletion of role definitions."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from rbac_api.api.dependencies import DBSession
from rbac_api.core.database import storage_guard
from rbac_api.core.errors import ConflictError, NotFoundError
from rbac_api.core.permissions.models import Role, UserRole, role_permissions


logger = structlog.get_logger()


class RoleRegistry:
    """Repository for role definitions.

    Role names are unique: creation pre-checks the name and also
    translates a unique-constraint violation (a concurrent create) into
    ``ConflictError``.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create_role(self, name: str, description: str = "") -> Role:
        """Create a new role.

        Args:
            name: Unique role name
            description: Human-readable description

        Returns:
            The created role with id and created_at populated

        Raises:
            ConflictError: If a role with this name already exists
            PersistenceError: On storage failure
        """
        if await self.get_role_by_name(name) is not None:
            raise ConflictError(
                "Role name already exists",
                error_code="role_exists",
                details={"name": name},
            )

        role = Role(name=name, description=description)
        async with storage_guard("create_role"):
            try:
                async with self.session.begin_nested():
                    self.session.add(role)
                    await self.session.flush()
            except IntegrityError as exc:
                raise ConflictError(
                    "Role name already exists",
                    error_code="role_exists",
                    details={"name": name},
                ) from exc
            await self.session.refresh(role)

        logger.info("role_created", role_id=str(role.id), name=name)
        return role

    async def get_role(self, role_id: UUID) -> Role:
        """Get a role by ID.

        Raises:
            NotFoundError: If the role does not exist
        """
        async with storage_guard("get_role"):
            role = await self.session.get(Role, role_id)
        if role is None:
            raise NotFoundError(
                "Role not found",
                resource="role",
                resource_id=str(role_id),
            )
        return role

    async def get_role_by_name(self, name: str) -> Role | None:
        """Get a role by its unique name, or None."""
        async with storage_guard("get_role_by_name"):
            result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def list_roles(self) -> list[Role]:
        """List all roles ordered by name."""
        async with storage_guard("list_roles"):
            result = await self.session.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def get_roles_for_user(self, user_id: UUID) -> list[Role]:
        """List the roles assigned to a user, ordered by name.

        A user with no assignments (or an unknown user) yields an empty list.
        """
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        async with storage_guard("get_roles_for_user"):
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_role(self, role_id: UUID) -> None:
        """Delete a role together with its assignments and grants.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.get_role(role_id)

        async with storage_guard("delete_role"):
            await self.session.execute(
                delete(UserRole).where(UserRole.role_id == role_id)
            )
            await self.session.execute(
                delete(role_permissions).where(role_permissions.c.role_id == role_id)
            )
            await self.session.delete(role)
            await self.session.flush()

        logger.info("role_deleted", role_id=str(role_id), name=role.name)


# Type alias for dependency injection
RoleRegistryDep = Annotated[RoleRegistry, Depends(RoleRegistry)]
