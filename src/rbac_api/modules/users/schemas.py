"""Pydantic schemas for user operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from rbac_api.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from rbac_api.core.permissions.schemas import RoleResponse


# ============================================================
# User Schemas
# ============================================================


class UserBase(BaseModel):
    """Base schema for user data."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class UserResponse(UserBase):
    """Schema for user response data."""

    id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================
# Authentication Schemas
# ============================================================


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration in seconds")


class LoginResponse(TokenResponse):
    """Schema for login response: the token plus who it was issued to."""

    user: UserResponse
    roles: list[RoleResponse]


# ============================================================
# Registration Schemas
# ============================================================


class RegisterRequest(UserBase):
    """Schema for user registration.

    ``role_id`` optionally names a role to assign in the same transaction
    that creates the user.
    """

    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    role_id: UUID | None = None


class RegisterResponse(TokenResponse):
    """Schema for registration response."""

    user: UserResponse
