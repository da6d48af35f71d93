"""User helper operations for end-to-end test setup.

Each ``api_*`` function wraps one endpoint of the server's ``/api/v4/users``
family and returns the decoded response inside a small record such as
``{"user": {...}}`` or ``{"users": [...]}``.  ``base`` is the API root already
ending in ``/api/v4`` (see :func:`~mm_e2e_cli.core.config.get_base_url`) and
``token`` is the session token obtained from :func:`api_login`.

Failures are reported by :mod:`mm_e2e_cli.core.http`; nothing here retries.
"""

from __future__ import annotations

import re
import sys
from typing import Any, Dict, Iterable, List
from urllib.error import HTTPError
from urllib.parse import quote

from .config import (
    DEFAULT_ADMIN,
    DEFAULT_PER_PAGE,
    clear_session,
    get_admin_account,
    load_session,
    save_session,
)
from .http import _handle_http_error, decode_body, http_json, http_request, response_cookies
from .utils import fetch_all_pages, generate_random_user, random_id

UserProfile = Dict[str, Any]

_USER_ID_RE = re.compile(r"^[a-z0-9]{26}$")


# --- session ---------------------------------------------------------------


def api_login(base: str, user: Dict[str, Any]) -> Dict[str, UserProfile]:
    """Log in with ``user["username"]``/``user["password"]`` and store the session.

    The token comes from the ``Token`` response header; ``MMUSERID`` and
    ``MMCSRF`` cookies are kept alongside it.
    """
    resp = http_request(
        "POST",
        f"{base}/users/login",
        None,
        {"login_id": user["username"], "password": user["password"]},
    )
    profile = decode_body(resp)
    if not isinstance(profile, dict):
        profile = {}
    cookies = response_cookies(resp)
    token = resp.headers.get("Token") or cookies.get("MMAUTHTOKEN")
    if not token:
        print("Login response did not include a session token", file=sys.stderr)
        sys.exit(2)
    save_session(token, cookies.get("MMUSERID") or profile.get("id"), cookies.get("MMCSRF"))
    return {"user": {**profile, "password": user["password"]}}


def api_admin_login(base: str) -> Dict[str, UserProfile]:
    return api_login(base, get_admin_account())


def api_logout(base: str, token: str | None) -> Dict[str, Any]:
    """Log out the current session; the stored session is dropped regardless."""
    try:
        data = http_json("POST", f"{base}/users/logout", token)
    finally:
        clear_session()
    return {"data": data}


# --- lookup ----------------------------------------------------------------


def api_get_me(base: str, token: str | None) -> Dict[str, UserProfile]:
    return {"user": http_json("GET", f"{base}/users/me", token)}


def api_get_user_by_id(base: str, token: str | None, user_id: str) -> Dict[str, UserProfile]:
    return {"user": http_json("GET", f"{base}/users/{user_id}", token)}


def api_get_user_by_email(base: str, token: str | None, email: str) -> Dict[str, UserProfile]:
    return {"user": http_json("GET", f"{base}/users/email/{quote(email)}", token)}


def api_get_users_by_usernames(
    base: str, token: str | None, usernames: Iterable[str]
) -> Dict[str, List[UserProfile]]:
    data = http_json("POST", f"{base}/users/usernames", token, list(usernames))
    return {"users": data if isinstance(data, list) else []}


def api_get_users(
    base: str,
    token: str | None,
    *,
    page: int = 0,
    per_page: int = DEFAULT_PER_PAGE,
    **filters: Any,
) -> Dict[str, List[UserProfile]]:
    """List users; ``filters`` become query parameters (``in_team``, ``active``...)."""
    params = dict(filters)
    params.update({"page": page, "per_page": per_page})
    data = http_json("GET", f"{base}/users", token, params=params)
    return {"users": data if isinstance(data, list) else []}


def api_get_users_not_in_team(
    base: str,
    token: str | None,
    *,
    team_id: str,
    page: int = 0,
    per_page: int = DEFAULT_PER_PAGE,
) -> Dict[str, List[UserProfile]]:
    return api_get_users(base, token, page=page, per_page=per_page, not_in_team=team_id)


def fetch_all_users(
    base: str,
    token: str | None,
    params: Dict[str, Any] | None = None,
    *,
    workers: int = 4,
    desc: str | None = "Fetch users",
) -> List[UserProfile]:
    return fetch_all_pages(f"{base}/users", token, params=params, workers=workers, desc=desc)


def resolve_user_id(base: str, token: str | None, ident: str) -> str:
    """Return the id for ``ident`` (id, ``me``, email or username).

    A 26-character lowercase value is tried as an id first; usernames can
    have the same shape, so a 404 there falls back to the username lookup.
    """
    if ident == "me":
        return ident
    if _USER_ID_RE.fullmatch(ident):
        try:
            http_json("GET", f"{base}/users/{ident}", token, handle_error=False)
            return ident
        except HTTPError as e:
            if e.code != 404:
                _handle_http_error(e)
    if "@" in ident:
        try:
            user = http_json(
                "GET", f"{base}/users/email/{quote(ident)}", token, handle_error=False
            )
        except HTTPError as e:
            if e.code != 404:
                _handle_http_error(e)
            user = None
        if isinstance(user, dict) and user.get("id"):
            return user["id"]
    else:
        for user in api_get_users_by_usernames(base, token, [ident])["users"]:
            if user.get("username", "").lower() == ident.lower():
                return user["id"]
    print(f"User not found: {ident}", file=sys.stderr)
    sys.exit(1)


# --- profile ---------------------------------------------------------------


def api_patch_user(
    base: str, token: str | None, user_id: str, user_data: Dict[str, Any]
) -> Dict[str, UserProfile]:
    """Patch ``user_id``; only the keys present in ``user_data`` change.

    Accepted keys: email, username, first_name, last_name, nickname, locale,
    timezone, position, props, notify_props.
    """
    return {"user": http_json("PUT", f"{base}/users/{user_id}/patch", token, user_data)}


def api_patch_me(base: str, token: str | None, user_data: Dict[str, Any]) -> Dict[str, UserProfile]:
    return api_patch_user(base, token, "me", user_data)


def api_save_tutorial_step(
    base: str, token: str | None, user_id: str, value: str = "999"
) -> Dict[str, Any]:
    """Mark the onboarding tutorial of ``user_id`` as finished (step ``999``)."""
    pref = {"user_id": user_id, "category": "tutorial_step", "name": user_id, "value": value}
    return {"data": http_json("PUT", f"{base}/users/{user_id}/preferences", token, [pref])}


# --- account lifecycle -----------------------------------------------------


def _create(base: str, token: str | None, user: Dict[str, Any], bypass_tutorial: bool) -> UserProfile:
    created = http_json("POST", f"{base}/users", token, user)
    if bypass_tutorial:
        api_save_tutorial_step(base, token, created["id"])
    return {**created, "password": user.get("password")}


def api_create_admin(
    base: str,
    token: str | None = None,
    *,
    name_prefix: str = DEFAULT_ADMIN["username"],
    bypass_tutorial: bool = True,
) -> Dict[str, UserProfile]:
    """Create the system admin account described by the configuration.

    On a fresh server the first account created becomes system admin, so no
    session is needed.  Without one, the tutorial step is saved after logging
    in as the new admin.  A ``name_prefix`` other than the default yields a
    uniquely named account sharing the configured password.
    """
    admin = get_admin_account()
    if name_prefix != DEFAULT_ADMIN["username"]:
        rid = random_id()
        admin["username"] = f"{name_prefix}{rid}"
        admin["email"] = f"{name_prefix}{rid}@sample.mattermost.com"
    payload = {**admin, "first_name": "Kenneth", "last_name": "Moreno"}
    sysadmin = _create(base, token, payload, bypass_tutorial=False)
    if bypass_tutorial:
        if not token:
            api_login(base, admin)
            token = load_session().get("token")
        api_save_tutorial_step(base, token, sysadmin["id"])
    return {"sysadmin": sysadmin}


def api_create_user(
    base: str,
    token: str | None,
    *,
    user: Dict[str, Any] | None = None,
    prefix: str = "user",
    bypass_tutorial: bool = True,
) -> Dict[str, UserProfile]:
    """Create ``user`` or, when omitted, a random account named after ``prefix``."""
    payload = dict(user) if user else generate_random_user(prefix)
    return {"user": _create(base, token, payload, bypass_tutorial)}


def api_create_guest_user(
    base: str,
    token: str | None,
    *,
    prefix: str = "guest",
    activate: bool = True,
    bypass_tutorial: bool = True,
) -> Dict[str, UserProfile]:
    guest = api_create_user(base, token, prefix=prefix, bypass_tutorial=bypass_tutorial)["user"]
    api_demote_user_to_guest(base, token, guest["id"])
    api_activate_user(base, token, guest["id"], active=activate)
    return {"guest": guest}


def api_demote_user_to_guest(base: str, token: str | None, user_id: str) -> Dict[str, Any]:
    return {"data": http_json("POST", f"{base}/users/{user_id}/demote", token)}


def api_promote_guest_to_user(base: str, token: str | None, user_id: str) -> Dict[str, Any]:
    return {"data": http_json("POST", f"{base}/users/{user_id}/promote", token)}


def api_activate_user(
    base: str, token: str | None, user_id: str, active: bool = True
) -> Dict[str, Any]:
    return {"data": http_json("PUT", f"{base}/users/{user_id}/active", token, {"active": active})}


def api_deactivate_user(base: str, token: str | None, user_id: str) -> Dict[str, Any]:
    return {"data": http_json("DELETE", f"{base}/users/{user_id}", token)}


def api_revoke_user_sessions(base: str, token: str | None, user_id: str) -> Dict[str, Any]:
    return {"data": http_json("POST", f"{base}/users/{user_id}/sessions/revoke/all", token)}


__all__ = [
    "UserProfile",
    "api_login",
    "api_admin_login",
    "api_logout",
    "api_get_me",
    "api_get_user_by_id",
    "api_get_user_by_email",
    "api_get_users_by_usernames",
    "api_get_users",
    "api_get_users_not_in_team",
    "fetch_all_users",
    "resolve_user_id",
    "api_patch_user",
    "api_patch_me",
    "api_save_tutorial_step",
    "api_create_admin",
    "api_create_user",
    "api_create_guest_user",
    "api_demote_user_to_guest",
    "api_promote_guest_to_user",
    "api_activate_user",
    "api_deactivate_user",
    "api_revoke_user_sessions",
]
