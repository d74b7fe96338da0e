"""RBAC administration routes.

Reads are available to any authenticated user; every mutation requires
the ``admin`` role.
"""

from uuid import UUID

from fastapi import Query, Request, status

from rbac_api.api.dependencies import DBSession
from rbac_api.core.auth.dependencies import CurrentUser
from rbac_api.core.constants import (
    ADMIN_ROLE_NAME,
    MAX_PERMISSION_ACTION_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
)
from rbac_api.core.permissions import (
    AssignmentLedgerDep,
    GrantLedgerDep,
    PermissionCatalogDep,
    Resolver,
    RoleRegistryDep,
    require_role,
)
from rbac_api.core.permissions.schemas import (
    AssignRoleRequest,
    AuthorizationDecision,
    GrantPermissionRequest,
    PermissionCreate,
    PermissionResponse,
    RoleCreate,
    RoleResponse,
)
from rbac_api.modules.rbac import router


# ============================================================
# Role Routes
# ============================================================


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    description="Create a new role. Role names are unique. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def create_role(
    data: RoleCreate,
    registry: RoleRegistryDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> RoleResponse:
    """Create a role."""
    role = await registry.create_role(data.name, data.description)
    return RoleResponse.model_validate(role)


@router.get(
    "/roles",
    response_model=list[RoleResponse],
    summary="List roles",
    description="List all roles ordered by name.",
)
async def list_roles(
    registry: RoleRegistryDep,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
) -> list[RoleResponse]:
    """List roles."""
    roles = await registry.list_roles()
    return [RoleResponse.model_validate(r) for r in roles]


@router.delete(
    "/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete role",
    description="Delete a role with its assignments and grants. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def delete_role(
    role_id: UUID,
    registry: RoleRegistryDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> None:
    """Delete a role."""
    await registry.delete_role(role_id)


# ============================================================
# Assignment Routes
# ============================================================


@router.get(
    "/users/{user_id}/roles",
    response_model=list[RoleResponse],
    summary="List a user's roles",
    description="List the roles assigned to a user, ordered by name.",
)
async def get_user_roles(
    user_id: UUID,
    registry: RoleRegistryDep,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
) -> list[RoleResponse]:
    """List roles assigned to a user."""
    roles = await registry.get_roles_for_user(user_id)
    return [RoleResponse.model_validate(r) for r in roles]


@router.post(
    "/users/assign-role",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Assign role",
    description="Assign a role to a user. Assigning twice is a no-op. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def assign_role(
    data: AssignRoleRequest,
    ledger: AssignmentLedgerDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> None:
    """Assign a role to a user."""
    await ledger.assign_role(data.user_id, data.role_id)


@router.delete(
    "/users/{user_id}/roles/{role_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove role",
    description="Remove a role from a user. Removing a missing assignment is a no-op. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def remove_role(
    user_id: UUID,
    role_id: UUID,
    ledger: AssignmentLedgerDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> None:
    """Remove a role from a user."""
    await ledger.remove_role(user_id, role_id)


# ============================================================
# Permission Routes
# ============================================================


@router.post(
    "/permissions",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create permission",
    description="Create a (resource, action) permission. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def create_permission(
    data: PermissionCreate,
    catalog: PermissionCatalogDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> PermissionResponse:
    """Create a permission."""
    permission = await catalog.create_permission(
        data.name, data.resource, data.action, data.description
    )
    return PermissionResponse.model_validate(permission)


@router.get(
    "/permissions",
    response_model=list[PermissionResponse],
    summary="List permissions",
    description="List all permissions ordered by resource and action.",
)
async def list_permissions(
    catalog: PermissionCatalogDep,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
) -> list[PermissionResponse]:
    """List permissions."""
    permissions = await catalog.list_permissions()
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.delete(
    "/permissions/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete permission",
    description="Delete a permission together with its grants. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def delete_permission(
    permission_id: UUID,
    catalog: PermissionCatalogDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> None:
    """Delete a permission."""
    await catalog.delete_permission(permission_id)


# ============================================================
# Grant Routes
# ============================================================


@router.get(
    "/roles/{role_id}/permissions",
    response_model=list[PermissionResponse],
    summary="List a role's permissions",
    description="List the permissions granted to a role, ordered by resource and action.",
)
async def get_role_permissions(
    role_id: UUID,
    catalog: PermissionCatalogDep,
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
) -> list[PermissionResponse]:
    """List permissions granted to a role."""
    permissions = await catalog.get_permissions_for_role(role_id)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.post(
    "/permissions/grant",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Grant permission",
    description="Grant a permission to a role. Granting twice is a no-op. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def grant_permission(
    data: GrantPermissionRequest,
    ledger: GrantLedgerDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> None:
    """Grant a permission to a role."""
    await ledger.grant(data.role_id, data.permission_id)


@router.delete(
    "/roles/{role_id}/permissions/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke permission",
    description="Revoke a permission from a role. Revoking a missing grant is a no-op. Requires the admin role.",
)
@require_role(ADMIN_ROLE_NAME)
async def revoke_permission(
    role_id: UUID,
    permission_id: UUID,
    ledger: GrantLedgerDep,
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> None:
    """Revoke a permission from a role."""
    await ledger.revoke(role_id, permission_id)


# ============================================================
# Authorization Check
# ============================================================


@router.get(
    "/authorize",
    response_model=AuthorizationDecision,
    summary="Check a permission",
    description="Report whether the current user may perform an action on a resource.",
)
async def authorize(
    resolver: Resolver,
    current_user: CurrentUser,
    resource: str = Query(..., min_length=1, max_length=MAX_PERMISSION_RESOURCE_LENGTH),
    action: str = Query(..., min_length=1, max_length=MAX_PERMISSION_ACTION_LENGTH),
) -> AuthorizationDecision:
    """Evaluate (current user, resource, action)."""
    allowed = await resolver.has_permission(current_user.id, resource, action)
    return AuthorizationDecision(
        user_id=current_user.id,
        resource=resource,
        action=action,
        allowed=allowed,
    )
