"""Auth module exports."""
from building_registry.auth.jwt import (
    CurrentUser,
    Role,
    RoleChecker,
    create_access_token,
    verify_token,
    get_current_user,
    require_admin,
    require_writer,
)

__all__ = [
    "CurrentUser",
    "Role",
    "RoleChecker",
    "create_access_token",
    "verify_token",
    "get_current_user",
    "require_admin",
    "require_writer",
]
