"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Extracting and validating JWT tokens
- Getting the current authenticated user
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rbac_api.core.auth.backend import decode_token
from rbac_api.core.auth.schemas import TokenData
from rbac_api.core.constants import ACCESS_TOKEN_TYPE
from rbac_api.core.errors import ForbiddenError, UnauthorizedError
from rbac_api.modules.users.models import User
from rbac_api.modules.users.repos import UserRepo


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Args:
        credentials: Bearer token credentials from the request

    Returns:
        Decoded token data

    Raises:
        UnauthorizedError: If token is missing or invalid
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    token_data = decode_token(credentials.credentials)
    if not token_data:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    if token_data.type != ACCESS_TOKEN_TYPE:
        raise UnauthorizedError(
            "Invalid token type",
            error_code="invalid_token_type",
        )

    return token_data


async def get_current_user(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    users: UserRepo,
) -> User:
    """Get the currently authenticated user.

    Args:
        token_data: Validated token data
        users: User repository bound to the request session

    Returns:
        The authenticated user

    Raises:
        UnauthorizedError: If user not found
        ForbiddenError: If user is inactive
    """
    user = await users.get_by_id(token_data.user_id)

    if not user:
        raise UnauthorizedError(
            "User not found",
            error_code="user_not_found",
        )

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    return user


# Type alias for cleaner dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
