"""Interactive helpers using InquirerPy."""

from __future__ import annotations

import sys
from typing import List

from InquirerPy import inquirer


def _execute(prompt):
    """Execute a prompt and handle ``Ctrl-C`` gracefully."""
    try:
        return prompt.execute()
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        sys.exit(1)


def prompt_password(username: str) -> str:
    prompt = inquirer.secret(
        message=f"Password for {username}:",
        validate=lambda ans: bool(ans) or "Password cannot be empty",
    )
    return _execute(prompt)


def confirm(message: str, default: bool = False) -> bool:
    return bool(_execute(inquirer.confirm(message=message, default=default)))


def _user_label(user: dict) -> str:
    return f"{user.get('username', '')} <{user.get('email', '')}>  [{user.get('id')}]"


def interactive_pick_users(users: List[dict], multiselect: bool = True) -> List[str]:
    """Let the operator pick accounts from ``users`` and return their ids."""
    choices = [{"name": _user_label(u), "value": u.get("id")} for u in users]
    choices.sort(key=lambda x: x["name"].lower())

    if multiselect:
        prompt = inquirer.checkbox(
            message="Select users (Space to toggle, Enter to confirm):",
            choices=choices,
            instruction="↑/↓, PgUp/PgDn, Space: toggle, Ctrl+S search, Enter",
            transformer=lambda res: f"{len(res)} selected",
            height="90%",
            validate=lambda ans: (len(ans) > 0) or "Select at least one user",
            keybindings={
                "pageup": [{"key": "pageup"}],
                "pagedown": [{"key": "pagedown"}],
                "toggle": [{"key": "space"}],
                "search": [{"key": "c-s"}],
                "search-next": [{"key": "enter"}],
            },
        )
        return list(_execute(prompt) or [])

    prompt = inquirer.select(
        message="Select a user:",
        choices=choices,
        instruction="↑/↓, Ctrl+S search, Enter",
        height="90%",
        keybindings={
            "search": [{"key": "c-s"}],
            "search-next": [{"key": "enter"}],
        },
    )
    result = _execute(prompt)
    return [result] if result else []
