"""Permission catalog: definitions of (resource, action) capabilities."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import delete, select

from rbac_api.api.dependencies import DBSession
from rbac_api.core.database import storage_guard
from rbac_api.core.errors import NotFoundError
from rbac_api.core.permissions.models import Permission, role_permissions


logger = structlog.get_logger()


class PermissionCatalog:
    """Repository for permission definitions.

    Neither the name nor the (resource, action) pair is unique. Listings
    are always ordered by (resource, action).
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create_permission(
        self,
        name: str,
        resource: str,
        action: str,
        description: str = "",
    ) -> Permission:
        """Create a new permission.

        Args:
            name: Human-readable label
            resource: Resource tag (e.g., "course")
            action: Action tag (e.g., "read")
            description: Longer description

        Returns:
            The created permission with id and created_at populated
        """
        permission = Permission(
            name=name,
            resource=resource,
            action=action,
            description=description,
        )
        async with storage_guard("create_permission"):
            self.session.add(permission)
            await self.session.flush()
            await self.session.refresh(permission)

        logger.info(
            "permission_created",
            permission_id=str(permission.id),
            resource=resource,
            action=action,
        )
        return permission

    async def get_permission(self, permission_id: UUID) -> Permission:
        """Get a permission by ID.

        Raises:
            NotFoundError: If the permission does not exist
        """
        async with storage_guard("get_permission"):
            permission = await self.session.get(Permission, permission_id)
        if permission is None:
            raise NotFoundError(
                "Permission not found",
                resource="permission",
                resource_id=str(permission_id),
            )
        return permission

    async def list_permissions(self) -> list[Permission]:
        """List all permissions ordered by (resource, action)."""
        stmt = select(Permission).order_by(Permission.resource, Permission.action)
        async with storage_guard("list_permissions"):
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_permissions_for_role(self, role_id: UUID) -> list[Permission]:
        """List the permissions granted to a role, ordered by (resource, action).

        An unknown role is treated like a role with no grants and yields
        an empty list.
        """
        stmt = (
            select(Permission)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .where(role_permissions.c.role_id == role_id)
            .order_by(Permission.resource, Permission.action)
        )
        async with storage_guard("get_permissions_for_role"):
            result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_permission(self, permission_id: UUID) -> None:
        """Delete a permission together with its grants.

        Raises:
            NotFoundError: If the permission does not exist
        """
        permission = await self.get_permission(permission_id)

        async with storage_guard("delete_permission"):
            await self.session.execute(
                delete(role_permissions).where(
                    role_permissions.c.permission_id == permission_id
                )
            )
            await self.session.delete(permission)
            await self.session.flush()

        logger.info(
            "permission_deleted",
            permission_id=str(permission_id),
            resource=permission.resource,
            action=permission.action,
        )


# Type alias for dependency injection
PermissionCatalogDep = Annotated[PermissionCatalog, Depends(PermissionCatalog)]
