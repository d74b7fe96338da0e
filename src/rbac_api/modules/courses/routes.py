"""Sample routes protected by permission gates.

Each endpoint only answers once the gate has allowed the caller; the
payloads themselves are placeholders.
"""

from fastapi import Request

from rbac_api.api.dependencies import DBSession
from rbac_api.core.auth.dependencies import CurrentUser
from rbac_api.core.permissions import require_permission
from rbac_api.modules.courses import router
from rbac_api.modules.courses.schemas import MessageResponse


@router.get(
    "/courses",
    response_model=MessageResponse,
    summary="List courses",
    description="Requires the course:read permission.",
)
@require_permission("course", "read")
async def list_courses(
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> MessageResponse:
    return MessageResponse(message="Course list")


@router.post(
    "/courses",
    response_model=MessageResponse,
    summary="Create course",
    description="Requires the course:create permission.",
)
@require_permission("course", "create")
async def create_course(
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> MessageResponse:
    return MessageResponse(message="Course created")


@router.get(
    "/grades",
    response_model=MessageResponse,
    summary="List grades",
    description="Requires the grades:read permission.",
)
@require_permission("grades", "read")
async def list_grades(
    request: Request,  # noqa: ARG001 - read by gate
    current_user: CurrentUser,  # noqa: ARG001 - required for auth
    db: DBSession,  # noqa: ARG001 - required for gate
) -> MessageResponse:
    return MessageResponse(message="Grades list")
