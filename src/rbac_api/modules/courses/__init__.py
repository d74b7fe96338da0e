"""Example protected resources gated by course and grades permissions."""

from fastapi import APIRouter


router = APIRouter(tags=["courses"])

# Import routes to register them (must be after router is defined)
from rbac_api.modules.courses import routes  # noqa: F401, E402


# Module metadata
__module__ = {
    "name": "courses",
    "version": "1.0.0",
    "description": "Permission-gated sample endpoints",
    "dependencies": ["rbac"],
}
