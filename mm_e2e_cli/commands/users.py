"""User commands for mm-e2e CLI."""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, Iterable, List

from ..core import (
    confirm,
    format_rows,
    get_base_and_token,
    interactive_pick_users,
    print_json,
    tqdm,
)
from ..core.users import (
    api_create_admin,
    api_create_guest_user,
    api_create_user,
    api_deactivate_user,
    api_get_user_by_id,
    api_get_users_by_usernames,
    api_get_users_not_in_team,
    api_patch_user,
    api_revoke_user_sessions,
    fetch_all_users,
    resolve_user_id,
)

USER_FIELDS = ["id", "username", "email", "first_name", "last_name", "roles"]

# (patch field, value given as JSON)
_PATCH_FIELDS = [
    ("email", False),
    ("username", False),
    ("first_name", False),
    ("last_name", False),
    ("nickname", False),
    ("locale", False),
    ("position", False),
    ("timezone", True),
    ("props", True),
    ("notify_props", True),
]


# --- helpers ---------------------------------------------------------------


def _for_each_user(idents: Iterable[str], action, verb: str) -> None:
    """Resolve each identifier and run ``action(base, token, uid)``.

    Lookup or request failures are reported per user; the command exits 1
    after processing everything if any of them failed.
    """
    base, token = get_base_and_token()
    had_error = False
    for ident in idents:
        try:
            uid = resolve_user_id(base, token, ident)
            action(base, token, uid)
        except SystemExit:
            print(f"failed {ident}", file=sys.stderr)
            had_error = True
            continue
        print(f"{verb} {ident}")
    if had_error:
        sys.exit(1)


def _parse_json_option(name: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        print(f"Invalid JSON for --{name.replace('_', '-')}: {e}", file=sys.stderr)
        sys.exit(1)


# --- lookup ----------------------------------------------------------------


def cmd_users_get(args) -> None:
    base, token = get_base_and_token()
    uid = resolve_user_id(base, token, args.user)
    print_json(api_get_user_by_id(base, token, uid)["user"])


def cmd_users_usernames(args) -> None:
    base, token = get_base_and_token()
    users = api_get_users_by_usernames(base, token, args.usernames)["users"]
    format_rows(users, USER_FIELDS)


def cmd_users_not_in_team(args) -> None:
    base, token = get_base_and_token()
    if args.all:
        users = fetch_all_users(base, token, {"not_in_team": args.team_id})
    else:
        users = api_get_users_not_in_team(
            base, token, team_id=args.team_id, page=args.page, per_page=args.per_page
        )["users"]
    format_rows(users, USER_FIELDS)


# --- profile ---------------------------------------------------------------


def cmd_users_patch(args) -> None:
    patch: Dict[str, Any] = {}
    for field, is_json in _PATCH_FIELDS:
        value = getattr(args, field, None)
        if value is None:
            continue
        patch[field] = _parse_json_option(field, value) if is_json else value
    if not patch:
        print("No update parameters provided", file=sys.stderr)
        sys.exit(1)
    base, token = get_base_and_token()
    uid = resolve_user_id(base, token, args.user)
    print_json(api_patch_user(base, token, uid, patch)["user"])


# --- account lifecycle -----------------------------------------------------


def cmd_users_create(args) -> None:
    count = getattr(args, "count", 1)
    if count is None or count < 1:
        print("--count must be at least 1", file=sys.stderr)
        sys.exit(1)
    base, token = get_base_and_token()
    if count == 1:
        user = api_create_user(
            base, token, prefix=args.prefix, bypass_tutorial=not args.no_bypass_tutorial
        )["user"]
        print_json(user)
        return

    created: List[dict] = []
    with tqdm(total=count, unit="user", desc="Create users") as bar:
        for _ in range(count):
            try:
                out = api_create_user(
                    base, token, prefix=args.prefix, bypass_tutorial=not args.no_bypass_tutorial
                )
                created.append(out["user"])
            except SystemExit:
                # http_json already printed the error message
                print(f"failed user #{bar.n + 1}", file=sys.stderr)
            bar.update(1)
    format_rows(created, ["id", "username", "email", "password"])
    if len(created) < count:
        sys.exit(1)


def cmd_users_create_admin(args) -> None:
    base, token = get_base_and_token(required=False)
    admin = api_create_admin(
        base, token, name_prefix=args.prefix, bypass_tutorial=not args.no_bypass_tutorial
    )["sysadmin"]
    print_json(admin)


def cmd_users_create_guest(args) -> None:
    base, token = get_base_and_token()
    guest = api_create_guest_user(
        base,
        token,
        prefix=args.prefix,
        activate=not args.no_activate,
        bypass_tutorial=not args.no_bypass_tutorial,
    )["guest"]
    print_json(guest)


def cmd_users_revoke_sessions(args) -> None:
    _for_each_user(args.users, api_revoke_user_sessions, "revoked sessions of")


def cmd_users_deactivate(args) -> None:
    idents = list(args.users or [])
    if not idents:
        base, token = get_base_and_token()
        active = fetch_all_users(base, token, {"active": "true"}, desc=None)
        if not active:
            print("No active users found", file=sys.stderr)
            sys.exit(1)
        idents = interactive_pick_users(active)
        if not idents:
            return
    if not args.yes and not confirm(f"Deactivate {len(idents)} user(s)?"):
        print("Aborted.")
        return
    _for_each_user(idents, api_deactivate_user, "deactivated")


__all__ = [
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
