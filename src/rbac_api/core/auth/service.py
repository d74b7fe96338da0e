"""Authentication service for login and registration."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from rbac_api.api.dependencies import DBSession
from rbac_api.core.auth.backend import (
    create_access_token,
    hash_password,
    verify_password,
)
from rbac_api.core.database import storage_guard
from rbac_api.core.errors import ConflictError, PersistenceError, UnauthorizedError
from rbac_api.core.permissions.assignments import AssignmentLedger
from rbac_api.core.permissions.models import Role
from rbac_api.core.permissions.roles import RoleRegistry
from rbac_api.modules.users.models import User
from rbac_api.modules.users.repos import UserRepository


logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations.

    Handles user registration and login.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)
        self.roles = RoleRegistry(db)
        self.assignments = AssignmentLedger(db)

    async def register(
        self,
        email: str,
        password: str,
        full_name: str,
        role_id: UUID | None = None,
    ) -> tuple[User, str]:
        """Register a new user, optionally with an initial role.

        The user row and the initial assignment are written inside one
        savepoint: if the assignment fails, the user is not created. A
        unique-constraint hit on the email (a concurrent registration) is
        reported as ``ConflictError``; any other storage fault propagates
        as ``PersistenceError``.

        Args:
            email: User's email address
            password: Plain text password
            full_name: User's full name
            role_id: Optional role to assign to the new user

        Returns:
            Tuple of (user, access_token)

        Raises:
            ConflictError: If email already exists
            NotFoundError: If role_id names no role
            PersistenceError: On storage failure
        """
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise ConflictError(
                "Email is already registered",
                error_code="email_exists",
            )

        try:
            async with storage_guard("register_user"), self.db.begin_nested():
                user = await self.user_repo.create(
                    User(
                        email=email,
                        password_hash=hash_password(password),
                        full_name=full_name,
                    )
                )
                if role_id is not None:
                    await self.assignments.assign_role(user.id, role_id)
        except PersistenceError as exc:
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            raise ConflictError(
                "Email is already registered",
                error_code="email_exists",
            ) from exc.__cause__

        logger.info(
            "user_registered",
            user_id=str(user.id),
            role_id=str(role_id) if role_id else None,
        )
        return user, create_access_token(user.id, user.email)

    async def login(
        self,
        email: str,
        password: str,
    ) -> tuple[User, list[Role], str]:
        """Authenticate a user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Tuple of (user, roles, access_token)

        Raises:
            UnauthorizedError: If credentials are invalid or the account is inactive
        """
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("login_failed", reason="invalid_credentials")
            raise UnauthorizedError(
                "Invalid email or password",
                error_code="invalid_credentials",
            )

        if not user.is_active:
            raise UnauthorizedError(
                "Account is deactivated",
                error_code="account_inactive",
            )

        roles = await self.roles.get_roles_for_user(user.id)
        logger.info("user_logged_in", user_id=str(user.id))
        return user, roles, create_access_token(user.id, user.email)


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
