"""Permission system for role-based access control (RBAC)."""

from rbac_api.core.permissions.assignments import AssignmentLedger, AssignmentLedgerDep
from rbac_api.core.permissions.catalog import PermissionCatalog, PermissionCatalogDep
from rbac_api.core.permissions.decorators import (
    require_all_permissions,
    require_any_permission,
    require_permission,
    require_role,
)
from rbac_api.core.permissions.grants import GrantLedger, GrantLedgerDep
from rbac_api.core.permissions.models import Permission, Role, UserRole, role_permissions
from rbac_api.core.permissions.resolver import PermissionResolver, Resolver
from rbac_api.core.permissions.roles import RoleRegistry, RoleRegistryDep


__all__ = [
    # Components
    "AssignmentLedger",
    "AssignmentLedgerDep",
    "GrantLedger",
    "GrantLedgerDep",
    # Models
    "Permission",
    "PermissionCatalog",
    "PermissionCatalogDep",
    "PermissionResolver",
    "Resolver",
    "Role",
    "RoleRegistry",
    "RoleRegistryDep",
    "UserRole",
    # Decorators
    "require_all_permissions",
    "require_any_permission",
    "require_permission",
    "require_role",
    "role_permissions",
]
