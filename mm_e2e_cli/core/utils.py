"""Utility functions for mm-e2e CLI."""

from __future__ import annotations

import json
import random
import string
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List

from tqdm import tqdm

from .config import API_MAX_PER_PAGE
from .http import http_json

__all__ = [
    "random_id",
    "generate_random_user",
    "fetch_all_pages",
    "format_rows",
    "print_json",
    "tqdm",
]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def random_id(length: int = 6) -> str:
    return "".join(random.choice(_ID_ALPHABET) for _ in range(length))


def generate_random_user(prefix: str = "user") -> Dict[str, str]:
    """Return a new account payload whose names are all derived from *prefix*."""
    rid = random_id()
    return {
        "email": f"{prefix}{rid}@sample.mattermost.com",
        "username": f"{prefix}{rid}",
        "password": "passwd",
        "first_name": f"First{rid}",
        "last_name": f"Last{rid}",
        "nickname": f"Nickname{rid}",
    }


def _get_page(url: str, token: str | None, params: Dict[str, Any], per_page: int, page: int) -> List[dict]:
    """GET a single page of a listing endpoint."""
    query = dict(params or {})
    query.update({"page": page, "per_page": per_page})
    data = http_json("GET", url, token, params=query)
    return data if isinstance(data, list) else []


def fetch_all_pages(
    url: str,
    token: str | None,
    *,
    params: Dict[str, Any] | None = None,
    per_page: int = API_MAX_PER_PAGE,
    workers: int = 4,
    desc: str | None = "Loading",
) -> List[dict]:
    """Fetch all pages concurrently until a short page is received.

    The server pages by ``page``/``per_page``; results keep page order.
    """
    per_page = min(per_page, API_MAX_PER_PAGE)
    params = dict(params or {})

    items = _get_page(url, token, params, per_page, 0)
    if len(items) < per_page:
        with tqdm(total=1, unit="pg", desc=desc, disable=desc is None) as bar:
            bar.update(1)
        return items

    pages: Dict[int, List[dict]] = {0: items}
    next_page = 1
    with tqdm(total=None, unit="pg", desc=desc, disable=desc is None) as bar:
        bar.update(1)
        while True:
            batch = list(range(next_page, next_page + max(1, workers)))
            stop = False
            with ThreadPoolExecutor(max_workers=max(1, workers)) as ex:
                futures = {ex.submit(_get_page, url, token, params, per_page, p): p for p in batch}
                for fut in as_completed(futures):
                    page_items = fut.result()
                    pages[futures[fut]] = page_items
                    bar.update(1)
                    if len(page_items) < per_page:
                        stop = True
            next_page += len(batch)
            if stop:
                break
    results: List[dict] = []
    for p in sorted(pages):
        results.extend(pages[p])
    return results


def format_rows(rows: List[Dict[str, Any]], fields: List[str]) -> None:
    if not rows:
        print("(no data)")
        return
    widths = [max(len(str(r.get(f, ""))) for r in rows + [dict(zip(fields, fields))]) for f in fields]
    header = " | ".join(f.ljust(w) for f, w in zip(fields, widths))
    sep = "-+-".join("-" * w for w in widths)
    print(header)
    print(sep)
    for r in rows:
        print(" | ".join(str(r.get(f, "")).ljust(w) for f, w in zip(fields, widths)))


def print_json(value: Any) -> None:
    print(json.dumps(value, ensure_ascii=False, indent=2))
