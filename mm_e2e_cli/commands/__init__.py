"""Command handlers for mm-e2e CLI."""

from .auth import (
    cmd_auth_set,
    cmd_auth_login,
    cmd_auth_admin_login,
    cmd_auth_logout,
    cmd_auth_me,
)
from .users import (
    cmd_users_get,
    cmd_users_usernames,
    cmd_users_not_in_team,
    cmd_users_patch,
    cmd_users_create,
    cmd_users_create_admin,
    cmd_users_create_guest,
    cmd_users_revoke_sessions,
    cmd_users_deactivate,
)

__all__ = [
    "cmd_auth_set",
    "cmd_auth_login",
    "cmd_auth_admin_login",
    "cmd_auth_logout",
    "cmd_auth_me",
    "cmd_users_get",
    "cmd_users_usernames",
    "cmd_users_not_in_team",
    "cmd_users_patch",
    "cmd_users_create",
    "cmd_users_create_admin",
    "cmd_users_create_guest",
    "cmd_users_revoke_sessions",
    "cmd_users_deactivate",
]
