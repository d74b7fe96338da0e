"""Request context middleware.

This module provides middleware for:
- Request tracing with unique IDs
- Binding the authenticated user id to the log context
"""

import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rbac_api.core.auth.backend import decode_token


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context

    When a valid bearer token is present its user id is also bound to
    ``request.state.user_id`` and the structlog context. The token is not
    enforced here; route dependencies do that.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and add request ID.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response with X-Request-ID header
        """
        # Get request ID from header or generate new one
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token_data = decode_token(auth_header.split(" ", 1)[1])
            if token_data:
                request.state.user_id = token_data.user_id
                structlog.contextvars.bind_contextvars(user_id=str(token_data.user_id))

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id

        # Clear structlog context
        structlog.contextvars.unbind_contextvars("request_id", "user_id")

        return response
