"""Assignment ledger: the User <-> Role relation."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import delete, select

from rbac_api.api.dependencies import DBSession
from rbac_api.core.database import insert_ignore, storage_guard
from rbac_api.core.errors import NotFoundError
from rbac_api.core.permissions.models import Role, UserRole
from rbac_api.modules.users.models import User


logger = structlog.get_logger()


class AssignmentLedger:
    """Records which roles are assigned to which users.

    Assigning is idempotent (an existing pair is left alone) and so is
    removal (a missing pair is not an error). Both sides of a new
    assignment must exist; otherwise ``NotFoundError`` is raised and
    nothing is written.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def assign_role(self, user_id: UUID, role_id: UUID) -> None:
        """Assign a role to a user.

        Raises:
            NotFoundError: If the user or role does not exist
            PersistenceError: On storage failure
        """
        async with storage_guard("assign_role"):
            if await self.session.get(User, user_id) is None:
                raise NotFoundError(
                    "User not found",
                    resource="user",
                    resource_id=str(user_id),
                )
            if await self.session.get(Role, role_id) is None:
                raise NotFoundError(
                    "Role not found",
                    resource="role",
                    resource_id=str(role_id),
                )

            inserted = await insert_ignore(
                self.session,
                UserRole,
                {"user_id": user_id, "role_id": role_id},
            )

        logger.info(
            "role_assigned",
            user_id=str(user_id),
            role_id=str(role_id),
            already_assigned=inserted == 0,
        )

    async def remove_role(self, user_id: UUID, role_id: UUID) -> None:
        """Remove a role from a user; a missing assignment is a no-op."""
        stmt = delete(UserRole).where(
            UserRole.user_id == user_id,
            UserRole.role_id == role_id,
        )
        async with storage_guard("remove_role"):
            result = await self.session.execute(stmt)

        logger.info(
            "role_removed",
            user_id=str(user_id),
            role_id=str(role_id),
            removed=bool(result.rowcount),
        )

    async def list_role_ids(self, user_id: UUID) -> set[UUID]:
        """Return the ids of the roles assigned to a user."""
        stmt = select(UserRole.role_id).where(UserRole.user_id == user_id)
        async with storage_guard("list_role_ids"):
            result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def list_user_ids(self, role_id: UUID) -> set[UUID]:
        """Return the ids of the users holding a role."""
        stmt = select(UserRole.user_id).where(UserRole.role_id == role_id)
        async with storage_guard("list_user_ids"):
            result = await self.session.execute(stmt)
        return set(result.scalars().all())


# Type alias for dependency injection
AssignmentLedgerDep = Annotated[AssignmentLedger, Depends(AssignmentLedger)]
