"""Configuration helpers for mm-e2e CLI."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Tuple

CONFIG_PATH = Path(os.path.expanduser("~")) / ".mm-e2e.json"
# Server used when no base URL is configured (local dev server)
DEFAULT_BASE = "http://localhost:8065"
API_PREFIX = "/api/v4"
# Page size used by the server when ``per_page`` is omitted
DEFAULT_PER_PAGE = 60
# Upper bound the server accepts for ``per_page``
API_MAX_PER_PAGE = 200

DEFAULT_ADMIN = {
    "username": "sysadmin",
    "password": "Sys@dmin-sample1",
    "email": "sysadmin@sample.mattermost.com",
}

_ENV_KEYS = {
    "MM_E2E_BASE_URL": "base_url",
    "MM_E2E_ADMIN_USERNAME": "admin_username",
    "MM_E2E_ADMIN_PASSWORD": "admin_password",
    "MM_E2E_ADMIN_EMAIL": "admin_email",
}


def _read_file() -> Dict[str, Any]:
    if CONFIG_PATH.exists():
        try:
            return json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
    return {}


def _write_file(cfg: Dict[str, Any]) -> None:
    CONFIG_PATH.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")


def load_config() -> Dict[str, Any]:
    """Load configuration from disk and environment."""
    cfg = _read_file()
    for env, key in _ENV_KEYS.items():
        if os.getenv(env):
            cfg[key] = os.getenv(env)
    if os.getenv("MM_E2E_TOKEN"):
        session = dict(cfg.get("session") or {})
        session["token"] = os.getenv("MM_E2E_TOKEN")
        cfg["session"] = session
    return cfg


def save_config(
    base_url: str | None = None,
    admin_username: str | None = None,
    admin_password: str | None = None,
    admin_email: str | None = None,
) -> None:
    """Persist configuration to CONFIG_PATH.

    Only values that were given are written; environment overrides are never
    copied into the file.
    """
    cfg = _read_file()
    if base_url is not None:
        cfg["base_url"] = base_url.rstrip("/")
    if admin_username is not None:
        cfg["admin_username"] = admin_username
    if admin_password is not None:
        cfg["admin_password"] = admin_password
    if admin_email is not None:
        cfg["admin_email"] = admin_email
    _write_file(cfg)
    print(f"Saved config to {CONFIG_PATH}")


def get_base_url() -> str:
    """Return the server URL normalized to end with the ``/api/v4`` prefix."""
    base = (load_config().get("base_url") or DEFAULT_BASE).rstrip("/")
    if not base.endswith(API_PREFIX):
        base = base + API_PREFIX
    return base


def load_session() -> Dict[str, Any]:
    return dict(load_config().get("session") or {})


def save_session(token: str, user_id: str | None = None, csrf: str | None = None) -> None:
    cfg = _read_file()
    cfg["session"] = {"token": token, "user_id": user_id, "csrf": csrf}
    _write_file(cfg)


def clear_session() -> None:
    """Forget the stored session (the CLI's equivalent of clearing cookies)."""
    cfg = _read_file()
    if cfg.pop("session", None) is not None:
        _write_file(cfg)


def get_base_and_token(required: bool = True) -> Tuple[str, str | None]:
    """Return API base URL and session token.

    Exits with code 2 when ``required`` is set and nobody is logged in.
    """
    base = get_base_url()
    token = load_session().get("token")
    if required and not token:
        print(
            "Not logged in. Run: mm-e2e auth login <username> or mm-e2e auth admin-login",
            file=sys.stderr,
        )
        sys.exit(2)
    return base, token


def get_admin_account() -> Dict[str, str]:
    """Return the admin credentials from config/env, falling back to defaults."""
    cfg = load_config()
    return {
        "username": cfg.get("admin_username") or DEFAULT_ADMIN["username"],
        "password": cfg.get("admin_password") or DEFAULT_ADMIN["password"],
        "email": cfg.get("admin_email") or DEFAULT_ADMIN["email"],
    }
