"""Grant ledger: the Role <-> Permission relation."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import delete, select

from rbac_api.api.dependencies import DBSession
from rbac_api.core.database import insert_ignore, storage_guard
from rbac_api.core.errors import NotFoundError
from rbac_api.core.permissions.models import Permission, Role, role_permissions


logger = structlog.get_logger()


class GrantLedger:
    """Records which permissions are granted to which roles.

    Mirrors ``AssignmentLedger``: idempotent grant, idempotent revoke,
    existence of both sides checked before a grant is written.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def grant(self, role_id: UUID, permission_id: UUID) -> None:
        """Grant a permission to a role.

        Raises:
            NotFoundError: If the role or permission does not exist
            PersistenceError: On storage failure
        """
        async with storage_guard("grant_permission"):
            if await self.session.get(Role, role_id) is None:
                raise NotFoundError(
                    "Role not found",
                    resource="role",
                    resource_id=str(role_id),
                )
            if await self.session.get(Permission, permission_id) is None:
                raise NotFoundError(
                    "Permission not found",
                    resource="permission",
                    resource_id=str(permission_id),
                )

            inserted = await insert_ignore(
                self.session,
                role_permissions,
                {"role_id": role_id, "permission_id": permission_id},
            )

        logger.info(
            "permission_granted",
            role_id=str(role_id),
            permission_id=str(permission_id),
            already_granted=inserted == 0,
        )

    async def revoke(self, role_id: UUID, permission_id: UUID) -> None:
        """Revoke a permission from a role; a missing grant is a no-op."""
        stmt = delete(role_permissions).where(
            role_permissions.c.role_id == role_id,
            role_permissions.c.permission_id == permission_id,
        )
        async with storage_guard("revoke_permission"):
            result = await self.session.execute(stmt)

        logger.info(
            "permission_revoked",
            role_id=str(role_id),
            permission_id=str(permission_id),
            removed=bool(result.rowcount),
        )

    async def list_permission_ids(self, role_id: UUID) -> set[UUID]:
        """Return the ids of the permissions granted to a role."""
        stmt = select(role_permissions.c.permission_id).where(
            role_permissions.c.role_id == role_id
        )
        async with storage_guard("list_permission_ids"):
            result = await self.session.execute(stmt)
        return set(result.scalars().all())


# Type alias for dependency injection
GrantLedgerDep = Annotated[GrantLedger, Depends(GrantLedger)]
