#!/usr/bin/env python
"""
Seed the RBAC tables for development.

Creates the admin role plus the course/grades permissions used by the
sample endpoints, and optionally an admin user.
"""

import argparse
import asyncio
import sys


# Add src to path for imports
sys.path.insert(0, "src")

from rbac_api.core.auth.backend import hash_password
from rbac_api.core.constants import ADMIN_ROLE_NAME
from rbac_api.core.database import async_session_factory
from rbac_api.core.permissions import (
    AssignmentLedger,
    GrantLedger,
    PermissionCatalog,
    RoleRegistry,
)
from rbac_api.modules.users.models import User
from rbac_api.modules.users.repos import UserRepository


# role name -> (description, [(name, resource, action), ...])
DEFAULT_ROLES: dict[str, tuple[str, list[tuple[str, str, str]]]] = {
    ADMIN_ROLE_NAME: (
        "Full administrative access",
        [
            ("Read courses", "course", "read"),
            ("Create courses", "course", "create"),
            ("Read grades", "grades", "read"),
        ],
    ),
    "teacher": (
        "Teaches courses and reads grades",
        [
            ("Read courses", "course", "read"),
            ("Read grades", "grades", "read"),
        ],
    ),
    "student": (
        "Attends courses",
        [("Read courses", "course", "read")],
    ),
}


async def seed_default(admin_email: str | None, admin_password: str | None) -> None:
    """Create default roles, permissions and grants."""
    async with async_session_factory() as session:
        roles = RoleRegistry(session)
        catalog = PermissionCatalog(session)
        grants = GrantLedger(session)

        existing = {p.key: p for p in await catalog.list_permissions()}

        for role_name, (description, permissions) in DEFAULT_ROLES.items():
            role = await roles.get_role_by_name(role_name)
            if role:
                print(f"Role already exists: {role.name}")
            else:
                role = await roles.create_role(role_name, description)
                print(f"Created role: {role.name}")

            for name, resource, action in permissions:
                permission = existing.get((resource, action))
                if permission is None:
                    permission = await catalog.create_permission(name, resource, action)
                    existing[permission.key] = permission
                    print(f"Created permission: {resource}:{action}")
                await grants.grant(role.id, permission.id)

        if admin_email and admin_password:
            users = UserRepository(session)
            admin = await users.get_by_email(admin_email)
            if admin:
                print(f"User already exists: {admin.email}")
            else:
                admin = await users.create(
                    User(
                        email=admin_email,
                        password_hash=hash_password(admin_password),
                        full_name="Administrator",
                    )
                )
                print(f"Created user: {admin.email}")
            admin_role = await roles.get_role_by_name(ADMIN_ROLE_NAME)
            await AssignmentLedger(session).assign_role(admin.id, admin_role.id)

        await session.commit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with RBAC defaults")
    parser.add_argument("--admin-email", help="Create (or reuse) this admin user")
    parser.add_argument("--admin-password", help="Password for a new admin user")
    args = parser.parse_args()

    asyncio.run(seed_default(args.admin_email, args.admin_password))
