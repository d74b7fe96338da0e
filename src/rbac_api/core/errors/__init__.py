"""Error handling module with RFC 7807 Problem Details."""

from rbac_api.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    UnauthorizedError,
    ValidationError,
)
from rbac_api.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "PersistenceError",
    "ProblemDetail",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
