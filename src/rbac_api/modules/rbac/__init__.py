"""RBAC administration module: roles, permissions, assignments and grants."""

from fastapi import APIRouter


router = APIRouter(tags=["rbac"])

# Import routes to register them (must be after router is defined)
from rbac_api.modules.rbac import routes  # noqa: F401, E402


# Module metadata
__module__ = {
    "name": "rbac",
    "version": "1.0.0",
    "description": "Role and permission administration",
    "dependencies": ["users"],
}
