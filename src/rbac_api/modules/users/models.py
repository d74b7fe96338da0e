"""User database models."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rbac_api.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from rbac_api.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """User model representing an authenticated user.

    The RBAC core only references users by id; credentials are handled
    by the auth backend.

    Attributes:
        email: Unique email address
        password_hash: Bcrypt-hashed password
        full_name: User's display name
        is_active: Whether the user can log in
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
