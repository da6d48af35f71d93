"""Command line entry point for mm-e2e CLI."""

from __future__ import annotations

import argparse
import sys

from mm_e2e_cli.core import API_MAX_PER_PAGE, DEFAULT_BASE, DEFAULT_PER_PAGE
from mm_e2e_cli.commands import (
    cmd_auth_set,
    cmd_auth_login,
    cmd_auth_admin_login,
    cmd_auth_logout,
    cmd_auth_me,
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


def _add_tutorial_flag(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--no-bypass-tutorial",
        action="store_true",
        help="Leave the onboarding tutorial enabled for the new account",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(prog="mm-e2e", description="Mattermost end-to-end test helpers")
    sub = parser.add_subparsers(dest="cmd")

    # auth
    p_auth = sub.add_parser("auth", help="Authentication")
    sub_auth = p_auth.add_subparsers(dest="auth_cmd")

    p_auth_set = sub_auth.add_parser("set", help="Save server URL and admin account to ~/.mm-e2e.json")
    p_auth_set.add_argument("--base-url", help=f"Server URL (default: {DEFAULT_BASE})")
    p_auth_set.add_argument("--admin-username")
    p_auth_set.add_argument("--admin-password")
    p_auth_set.add_argument("--admin-email")
    p_auth_set.set_defaults(func=cmd_auth_set)

    p_auth_login = sub_auth.add_parser("login", help="Log in and store the session")
    p_auth_login.add_argument("username")
    p_auth_login.add_argument("--password", help="Prompted for when omitted")
    p_auth_login.set_defaults(func=cmd_auth_login)

    p_auth_admin = sub_auth.add_parser("admin-login", help="Log in as the configured admin")
    p_auth_admin.set_defaults(func=cmd_auth_admin_login)

    p_auth_logout = sub_auth.add_parser("logout", help="Log out and forget the session")
    p_auth_logout.set_defaults(func=cmd_auth_logout)

    p_auth_me = sub_auth.add_parser("me", help="Show the logged in user")
    p_auth_me.set_defaults(func=cmd_auth_me)

    # users
    p_users = sub.add_parser("users", help="Manage users")
    sub_users = p_users.add_subparsers(dest="users_cmd")

    p_get = sub_users.add_parser("get", help="Show a user")
    p_get.add_argument("user", help="User id, email, username or 'me' (id-shaped names fall back to username lookup)")
    p_get.set_defaults(func=cmd_users_get)

    p_usernames = sub_users.add_parser("usernames", help="Look up users by username")
    p_usernames.add_argument("usernames", nargs="+")
    p_usernames.set_defaults(func=cmd_users_usernames)

    p_patch = sub_users.add_parser("patch", help="Patch a user's profile")
    p_patch.add_argument("user", help="User id, email, username or 'me'")
    for opt in ("email", "username", "first-name", "last-name", "nickname", "locale", "position"):
        p_patch.add_argument(f"--{opt}")
    p_patch.add_argument("--timezone", help="JSON object")
    p_patch.add_argument("--props", help="JSON object")
    p_patch.add_argument("--notify-props", help="JSON object")
    p_patch.set_defaults(func=cmd_users_patch)

    p_create = sub_users.add_parser("create", help="Create random user(s)")
    p_create.add_argument("--prefix", default="user", help="Name prefix (default: user)")
    p_create.add_argument("--count", type=int, default=1)
    _add_tutorial_flag(p_create)
    p_create.set_defaults(func=cmd_users_create)

    p_create_admin = sub_users.add_parser("create-admin", help="Create the admin account")
    p_create_admin.add_argument("--prefix", default="sysadmin", help="Name prefix (default: sysadmin)")
    _add_tutorial_flag(p_create_admin)
    p_create_admin.set_defaults(func=cmd_users_create_admin)

    p_create_guest = sub_users.add_parser("create-guest", help="Create a random guest user")
    p_create_guest.add_argument("--prefix", default="guest", help="Name prefix (default: guest)")
    p_create_guest.add_argument("--no-activate", action="store_true", help="Do not activate the guest")
    _add_tutorial_flag(p_create_guest)
    p_create_guest.set_defaults(func=cmd_users_create_guest)

    p_revoke = sub_users.add_parser("revoke-sessions", help="Revoke all sessions of user(s)")
    p_revoke.add_argument("users", nargs="+", help="User ids, emails or usernames")
    p_revoke.set_defaults(func=cmd_users_revoke_sessions)

    p_not_in_team = sub_users.add_parser("not-in-team", help="List users that are not members of a team")
    p_not_in_team.add_argument("team_id")
    p_not_in_team.add_argument("--page", type=int, default=0)
    p_not_in_team.add_argument(
        "--per-page", type=int, default=DEFAULT_PER_PAGE, help=f"Max {API_MAX_PER_PAGE}"
    )
    p_not_in_team.add_argument("--all", action="store_true", help="Fetch every page")
    p_not_in_team.set_defaults(func=cmd_users_not_in_team)

    p_deactivate = sub_users.add_parser("deactivate", help="Deactivate user(s)")
    p_deactivate.add_argument("users", nargs="*", help="User ids, emails or usernames; pick interactively if omitted")
    p_deactivate.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p_deactivate.set_defaults(func=cmd_users_deactivate)

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0
    if args.cmd == "auth" and not getattr(args, "auth_cmd", None):
        p_auth.print_help()
        return 0
    if args.cmd == "users" and not getattr(args, "users_cmd", None):
        p_users.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
