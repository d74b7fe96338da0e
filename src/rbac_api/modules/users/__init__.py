"""User identity store."""

from rbac_api.modules.users.models import User
from rbac_api.modules.users.repos import UserRepo, UserRepository


__all__ = ["User", "UserRepo", "UserRepository"]
