"""Authorization gates for route protection.

This module provides decorators that can be applied to FastAPI
routes to require specific permissions or roles. The decorated handler
must accept ``current_user`` and ``db`` keyword arguments. When it also
accepts ``request``, the outcome is left on ``request.state.authorization``
for the request log.

A gate has three outcomes:
- allowed: the handler runs
- denied: ``ForbiddenError`` (403)
- undetermined (storage fault while resolving): the handler does not run
  and ``PersistenceError`` with error code ``authorization_undetermined``
  (503) is raised, so the fault stays distinguishable from a deny
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast
from uuid import UUID

import structlog

from rbac_api.core.errors import ForbiddenError, PersistenceError, UnauthorizedError
from rbac_api.core.permissions.resolver import PermissionResolver


if TYPE_CHECKING:
    from fastapi import Request
    from sqlalchemy.ext.asyncio import AsyncSession

    from rbac_api.modules.users.models import User


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")

Check = Callable[[PermissionResolver, UUID], Awaitable[bool]]


def _get_user_and_db(
    kwargs: dict[str, Any],
) -> tuple["User | None", "AsyncSession | None", "Request | None"]:
    """Extract user, db session, and request from handler kwargs."""
    user = cast("User | None", kwargs.get("current_user"))
    db = cast("AsyncSession | None", kwargs.get("db"))
    request = cast("Request | None", kwargs.get("request"))
    return user, db, request


def _record(request: "Request | None", outcome: str, required: list[str]) -> None:
    """Leave the gate outcome on the request for the request log."""
    if request is not None:
        request.state.authorization = outcome
        request.state.required = required


async def _evaluate(
    check: Check,
    user: "User",
    db: "AsyncSession",
    required: list[str],
    endpoint: str,
) -> bool:
    """Run a resolver check, turning a storage fault into a closed gate.

    Raises:
        PersistenceError: With error code ``authorization_undetermined``
    """
    resolver = PermissionResolver(db)
    try:
        return await check(resolver, user.id)
    except PersistenceError as exc:
        logger.error(
            "authorization_undetermined",
            user_id=str(user.id),
            required=required,
            endpoint=endpoint,
            operation=exc.details.get("operation"),
        )
        raise PersistenceError(
            "Authorization could not be determined",
            error_code="authorization_undetermined",
            operation="authorize",
            details={"required": required},
        ) from exc


def _gate(
    check: Check,
    required: list[str],
    message: str,
    error_code: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Build a decorator that runs ``check`` before the handler."""

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, db, request = _get_user_and_db(kwargs)

            if not user:
                raise UnauthorizedError(
                    "Authentication required",
                    error_code="auth_required",
                )

            if not db:
                raise ForbiddenError(
                    "Permission check failed",
                    error_code="permission_check_failed",
                )

            endpoint = request.url.path if request else func.__name__
            try:
                allowed = await _evaluate(check, user, db, required, endpoint)
            except PersistenceError:
                _record(request, "undetermined", required)
                raise

            if not allowed:
                _record(request, "denied", required)
                logger.warning(
                    "authorization_denied",
                    user_id=str(user.id),
                    required=required,
                    endpoint=endpoint,
                )
                raise ForbiddenError(
                    message,
                    error_code=error_code,
                    details={"required": required},
                )

            _record(request, "allowed", required)
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    resource: str, action: str
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a specific permission to access a route.

    Usage:
        @router.get("/grades")
        @require_permission("grades", "read")
        async def list_grades(current_user: CurrentUser, db: DBSession):
            ...

    Args:
        resource: The resource being accessed (e.g., "grades")
        action: The action being performed (e.g., "read")

    Returns:
        Decorator function
    """

    async def check(resolver: PermissionResolver, user_id: UUID) -> bool:
        return await resolver.has_permission(user_id, resource, action)

    return _gate(
        check,
        [f"{resource}:{action}"],
        f"Missing required permission: {resource}:{action}",
        "permission_denied",
    )


def require_any_permission(
    permissions: list[tuple[str, str]],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires any one of the specified permissions.

    Usage:
        @router.get("/reports")
        @require_any_permission([("reports", "read"), ("grades", "read")])
        async def get_reports(current_user: CurrentUser, db: DBSession):
            ...
    """
    perm_strs = [f"{r}:{a}" for r, a in permissions]

    async def check(resolver: PermissionResolver, user_id: UUID) -> bool:
        return await resolver.has_any_permission(user_id, permissions)

    return _gate(
        check,
        perm_strs,
        f"Missing required permission. Need one of: {', '.join(perm_strs)}",
        "permission_denied",
    )


def require_all_permissions(
    permissions: list[tuple[str, str]],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires all of the specified permissions.

    Usage:
        @router.post("/grades/publish")
        @require_all_permissions([("grades", "write"), ("course", "update")])
        async def publish_grades(current_user: CurrentUser, db: DBSession):
            ...
    """
    perm_strs = [f"{r}:{a}" for r, a in permissions]

    async def check(resolver: PermissionResolver, user_id: UUID) -> bool:
        return await resolver.has_all_permissions(user_id, permissions)

    return _gate(
        check,
        perm_strs,
        f"Missing required permissions: {', '.join(perm_strs)}",
        "permission_denied",
    )


def require_role(
    role_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires the user to hold a role with this name.

    Usage:
        @router.post("/roles")
        @require_role("admin")
        async def create_role(current_user: CurrentUser, db: DBSession):
            ...
    """

    async def check(resolver: PermissionResolver, user_id: UUID) -> bool:
        return await resolver.has_role(user_id, role_name)

    return _gate(
        check,
        [f"role:{role_name}"],
        f"Missing required role: {role_name}",
        "role_required",
    )
