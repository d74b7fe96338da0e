"""Authentication API routes.

Provides endpoints for:
- User registration
- Login
- The current user's profile
"""

from fastapi import APIRouter, status

from rbac_api.config import settings
from rbac_api.core.auth.dependencies import CurrentUser
from rbac_api.core.auth.service import AuthSvc
from rbac_api.core.permissions.schemas import RoleResponse
from rbac_api.modules.users.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Creates a user account, optionally assigning an initial role.",
)
async def register(
    data: RegisterRequest,
    service: AuthSvc,
) -> RegisterResponse:
    """Register a new user."""
    user, access_token = await service.register(
        email=data.email,
        password=data.password,
        full_name=data.full_name,
        role_id=data.role_id,
    )

    return RegisterResponse(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login with email and password",
    description="Authenticate with email and password to receive an access token.",
)
async def login(
    data: LoginRequest,
    service: AuthSvc,
) -> LoginResponse:
    """Login with email and password."""
    user, roles, access_token = await service.login(
        email=data.email,
        password=data.password,
    )

    return LoginResponse(
        user=UserResponse.model_validate(user),
        roles=[RoleResponse.model_validate(role) for role in roles],
        access_token=access_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Returns the currently authenticated user's profile.",
)
async def get_me(
    current_user: CurrentUser,
) -> UserResponse:
    """Get current user profile."""
    return UserResponse.model_validate(current_user)
