"""Authentication module for JWT and password handling."""

from rbac_api.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from rbac_api.core.auth.dependencies import CurrentUser, get_current_user
from rbac_api.core.auth.middleware import RequestIdMiddleware
from rbac_api.core.auth.schemas import TokenData
from rbac_api.core.auth.service import AuthService, AuthSvc


__all__ = [
    # Service
    "AuthService",
    "AuthSvc",
    # Dependencies
    "CurrentUser",
    # Middleware
    "RequestIdMiddleware",
    # Schemas
    "TokenData",
    # Token utilities
    "create_access_token",
    "decode_token",
    "get_current_user",
    # Password utilities
    "hash_password",
    "verify_password",
]
