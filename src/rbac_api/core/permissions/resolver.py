"""Permission resolution.

Answers "may user U perform action A on resource R?" by joining the
user's role assignments to those roles' grants and matching the
requested (resource, action) pair exactly. There is no cache: every
check reads the current ledgers, so a revoke or removal takes effect on
the very next check.

A storage failure raises ``PersistenceError``. It is never reported as
``False``; callers decide how to fail closed.
"""

from collections.abc import Iterable
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import Select, and_, or_, select

from rbac_api.api.dependencies import DBSession
from rbac_api.core.database import storage_guard
from rbac_api.core.permissions.models import (
    Permission,
    Role,
    UserRole,
    role_permissions,
)


logger = structlog.get_logger()


class PermissionResolver:
    """Service for checking user permissions.

    Evaluates whether a user has specific permissions based on the
    union of the grants of their assigned roles.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    def _granted_permissions(self, user_id: UUID) -> Select[tuple[str, str]]:
        """Select the permissions reachable from a user through their roles."""
        return (
            select(Permission.resource, Permission.action)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == role_permissions.c.role_id)
            .where(UserRole.user_id == user_id)
        )

    async def has_permission(self, user_id: UUID, resource: str, action: str) -> bool:
        """Check if a user has a specific permission.

        Args:
            user_id: The user's UUID
            resource: The resource to check (e.g., "grades")
            action: The action to check (e.g., "read")

        Returns:
            True if any role assigned to the user is granted a permission
            with exactly this resource and action, False otherwise

        Raises:
            PersistenceError: If the check could not be evaluated
        """
        stmt = select(
            self._granted_permissions(user_id)
            .where(Permission.resource == resource, Permission.action == action)
            .exists()
        )
        async with storage_guard("has_permission"):
            allowed = bool(await self.session.scalar(stmt))

        logger.debug(
            "permission_checked",
            user_id=str(user_id),
            resource=resource,
            action=action,
            allowed=allowed,
        )
        return allowed

    async def has_any_permission(
        self,
        user_id: UUID,
        permissions: Iterable[tuple[str, str]],
    ) -> bool:
        """Check if a user has at least one of the given permissions.

        Args:
            user_id: The user's UUID
            permissions: (resource, action) pairs to check

        Returns:
            True if at least one pair is granted; False for an empty list
        """
        pairs = list(permissions)
        if not pairs:
            return False

        match = or_(
            *(
                and_(Permission.resource == resource, Permission.action == action)
                for resource, action in pairs
            )
        )
        stmt = select(self._granted_permissions(user_id).where(match).exists())
        async with storage_guard("has_any_permission"):
            return bool(await self.session.scalar(stmt))

    async def has_all_permissions(
        self,
        user_id: UUID,
        permissions: Iterable[tuple[str, str]],
    ) -> bool:
        """Check if a user has every one of the given permissions.

        Args:
            user_id: The user's UUID
            permissions: (resource, action) pairs to check

        Returns:
            True if every pair is granted; True for an empty list
        """
        required = set(permissions)
        if not required:
            return True

        granted = await self.get_user_permissions(user_id)
        return required <= granted

    async def get_user_permissions(self, user_id: UUID) -> set[tuple[str, str]]:
        """Get every (resource, action) pair a user currently holds."""
        stmt = self._granted_permissions(user_id).distinct()
        async with storage_guard("get_user_permissions"):
            result = await self.session.execute(stmt)
        return {(row.resource, row.action) for row in result}

    async def has_role(self, user_id: UUID, role_name: str) -> bool:
        """Check if a user is assigned the role with this exact name."""
        stmt = select(
            select(UserRole.role_id)
            .join(Role, Role.id == UserRole.role_id)
            .where(UserRole.user_id == user_id, Role.name == role_name)
            .exists()
        )
        async with storage_guard("has_role"):
            return bool(await self.session.scalar(stmt))


# Type alias for dependency injection
Resolver = Annotated[PermissionResolver, Depends(PermissionResolver)]
