"""Authentication related commands."""

from __future__ import annotations

from ..core import get_base_and_token, get_base_url, print_json, prompt_password, save_config
from ..core.users import api_admin_login, api_get_me, api_login, api_logout


def cmd_auth_set(args):
    save_config(
        base_url=args.base_url,
        admin_username=args.admin_username,
        admin_password=args.admin_password,
        admin_email=args.admin_email,
    )


def _report_login(user: dict) -> None:
    print(f"Logged in as {user.get('username')} ({user.get('id')})")


def cmd_auth_login(args):
    password = args.password or prompt_password(args.username)
    out = api_login(get_base_url(), {"username": args.username, "password": password})
    _report_login(out["user"])


def cmd_auth_admin_login(_args):
    out = api_admin_login(get_base_url())
    _report_login(out["user"])


def cmd_auth_logout(_args):
    base, token = get_base_and_token(required=False)
    if not token:
        print("Not logged in.")
        return
    api_logout(base, token)
    print("Logged out.")


def cmd_auth_me(_args):
    base, token = get_base_and_token()
    print_json(api_get_me(base, token)["user"])
