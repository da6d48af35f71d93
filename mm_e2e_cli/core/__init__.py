"""Core utilities for mm-e2e CLI."""

from .config import (
    CONFIG_PATH,
    DEFAULT_BASE,
    DEFAULT_PER_PAGE,
    API_MAX_PER_PAGE,
    load_config,
    save_config,
    get_base_url,
    get_base_and_token,
    get_admin_account,
    load_session,
    save_session,
    clear_session,
)
from .http import HttpResponse, http_json, http_request
from .utils import (
    random_id,
    generate_random_user,
    fetch_all_pages,
    format_rows,
    print_json,
    tqdm,
)
from .interactive import confirm, interactive_pick_users, prompt_password

__all__ = [
    "CONFIG_PATH", "DEFAULT_BASE", "DEFAULT_PER_PAGE", "API_MAX_PER_PAGE",
    "load_config", "save_config", "get_base_url", "get_base_and_token",
    "get_admin_account", "load_session", "save_session", "clear_session",
    "HttpResponse", "http_json", "http_request",
    "random_id",
    "generate_random_user",
    "fetch_all_pages",
    "format_rows",
    "print_json",
    "tqdm",
    "confirm", "interactive_pick_users", "prompt_password",
]
