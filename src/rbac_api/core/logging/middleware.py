"""Request logging middleware.

One ``request_completed`` event per request, carrying the authorization
outcome the route gate left on ``request.state`` and the error code set
by the exception handlers.
"""

import time
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

DEFAULT_EXCLUDE_PATHS = (
    "/health/live",
    "/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
)

# Copied from request.state when set
STATE_FIELDS = ("request_id", "user_id", "authorization", "required", "error_code")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request with its status, duration and gate outcome.

    ``authorization`` is one of ``allowed``, ``denied`` or ``undetermined``
    and is only present for gated routes. 5xx responses log at error
    level and 4xx at warning.
    """

    def __init__(
        self,
        app: Any,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths or DEFAULT_EXCLUDE_PATHS)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path.startswith(self.exclude_paths):
            return await call_next(request)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=_elapsed_ms(start_time),
            )
            raise

        fields: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": _elapsed_ms(start_time),
        }
        for name in STATE_FIELDS:
            value = getattr(request.state, name, None)
            if value is not None:
                fields[name] = value if isinstance(value, list) else str(value)

        if response.status_code >= 500:
            logger.error("request_completed", **fields)
        elif response.status_code >= 400:
            logger.warning("request_completed", **fields)
        else:
            logger.info("request_completed", **fields)

        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)
