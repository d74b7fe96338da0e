"""Pydantic schemas for role and permission administration."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from rbac_api.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_NAME_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
    MAX_ROLE_NAME_LENGTH,
)


# ============================================================
# Role Schemas
# ============================================================


class RoleCreate(BaseModel):
    """Schema for creating a role."""

    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    description: str = Field("", max_length=MAX_DESCRIPTION_LENGTH)


class RoleResponse(BaseModel):
    """Schema for role response data."""

    id: UUID
    name: str
    description: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AssignRoleRequest(BaseModel):
    """Schema for assigning a role to a user."""

    user_id: UUID
    role_id: UUID


# ============================================================
# Permission Schemas
# ============================================================


class PermissionCreate(BaseModel):
    """Schema for creating a permission."""

    name: str = Field(..., min_length=1, max_length=MAX_PERMISSION_NAME_LENGTH)
    resource: str = Field(..., min_length=1, max_length=MAX_PERMISSION_RESOURCE_LENGTH)
    action: str = Field(..., min_length=1, max_length=MAX_PERMISSION_ACTION_LENGTH)
    description: str = Field("", max_length=MAX_DESCRIPTION_LENGTH)


class PermissionResponse(BaseModel):
    """Schema for permission response data."""

    id: UUID
    name: str
    resource: str
    action: str
    description: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GrantPermissionRequest(BaseModel):
    """Schema for granting a permission to a role."""

    role_id: UUID
    permission_id: UUID


# ============================================================
# Authorization Schemas
# ============================================================


class AuthorizationDecision(BaseModel):
    """Result of an authorization check for the current user."""

    user_id: UUID
    resource: str
    action: str
    allowed: bool
