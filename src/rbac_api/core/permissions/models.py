"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Role: A uniquely named set of permissions
- Permission: An action that can be performed on a resource
- UserRole: Assignment of a role to a user
- role_permissions: Grant of a permission to a role

Relationship rows are removed with their role, permission or user
(``ON DELETE CASCADE``). The ledgers also delete them explicitly so the
behaviour does not depend on the backend enforcing foreign keys.
"""

from uuid import UUID

from sqlalchemy import Column, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rbac_api.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_NAME_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)
from rbac_api.core.database.base import Base, TimestampMixin, UUIDMixin


# Junction table for Role <-> Permission grants
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Permission(Base, UUIDMixin, TimestampMixin):
    """Permission model representing an action on a resource.

    The (resource, action) pair is what authorization checks match on,
    by exact string equality. ``name`` is only a human label and neither
    it nor the pair is unique.

    Attributes:
        name: Human-readable label (e.g., "Read grades")
        resource: The resource being protected (e.g., "course", "grades")
        action: The action being performed (e.g., "read", "create")
        description: Longer description of the permission
    """

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_NAME_LENGTH),
        nullable=False,
    )
    resource: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_RESOURCE_LENGTH),
        nullable=False,
        index=True,
    )
    action: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_ACTION_LENGTH),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=False,
        default="",
    )

    @property
    def key(self) -> tuple[str, str]:
        """Return the (resource, action) pair checked by the resolver."""
        return (self.resource, self.action)

    def __repr__(self) -> str:
        return f"<Permission({self.resource}:{self.action})>"


class Role(Base, UUIDMixin, TimestampMixin):
    """Role model representing a named set of permissions.

    Role names are unique because role-gated routes match on them.

    Attributes:
        name: Role name (e.g., "admin", "teacher", "student")
        description: Human-readable description of the role
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_ROLE_NAME_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=False,
        default="",
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"


class UserRole(Base, TimestampMixin):
    """Assignment of a role to a user.

    A user can hold several roles; their effective permissions are the
    union of all their roles' grants.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role_id: Mapped[UUID] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role_id={self.role_id})>"
