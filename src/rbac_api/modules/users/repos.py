"""User repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from rbac_api.api.dependencies import DBSession
from rbac_api.core.database import storage_guard
from rbac_api.modules.users.models import User


class UserRepository:
    """Repository for User database operations.

    Handles all database interactions for the User model.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated

        Raises:
            PersistenceError: On storage failure, including a duplicate email
        """
        async with storage_guard("create_user"):
            self.session.add(user)
            await self.session.flush()
            await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.id == user_id)
        async with storage_guard("get_user"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address.

        Args:
            email: The user's email

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.email == email)
        async with storage_guard("get_user_by_email"):
            result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
