"""Minimal HTTP helpers for the CLI.

The implementation uses :mod:`urllib` from the Python standard library.  Every
helper operation in :mod:`mm_e2e_cli.core.users` goes through
:func:`http_json` (or :func:`http_request` when response headers matter, as
with login).
"""

from __future__ import annotations

import json
import sys
from http.cookies import SimpleCookie
from typing import Any, Dict, NamedTuple
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen


class HttpResponse(NamedTuple):
    status: int
    headers: Any
    body: bytes


def _build_url(url: str, params: Dict[str, Any] | None) -> str:
    if not params:
        return url
    query = urlencode({k: v for k, v in params.items() if v is not None})
    if not query:
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{query}"


def http_request(
    method: str,
    url: str,
    token: str | None,
    payload: Any = None,
    *,
    params: Dict[str, Any] | None = None,
    handle_error: bool = True,
) -> HttpResponse:
    """Perform an HTTP request and return status, headers and raw body.

    ``payload`` may be any JSON-serializable value; the usernames endpoint,
    for instance, expects a bare list.  HTTP errors are handled by
    :func:`_handle_http_error` (print and exit) unless ``handle_error`` is
    ``False``, in which case the :class:`HTTPError` propagates.
    """

    headers = {
        "Accept": "application/json",
        "X-Requested-With": "XMLHttpRequest",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    data = None
    if payload is not None:
        headers["Content-Type"] = "application/json"
        data = json.dumps(payload).encode("utf-8")
    req = Request(url=_build_url(url, params), method=method.upper(), headers=headers, data=data)
    try:
        with urlopen(req, timeout=60) as resp:
            return HttpResponse(resp.status, resp.headers, resp.read())
    except HTTPError as e:
        if handle_error:
            _handle_http_error(e)
        raise
    except URLError as e:
        print(f"Network error: {e.reason}", file=sys.stderr)
        sys.exit(2)


def decode_body(resp: HttpResponse) -> Any:
    """Return the parsed JSON body of ``resp``, raw bytes when it is not JSON."""
    if not resp.body:
        return {}
    ctype = (resp.headers.get("Content-Type") or "").lower()
    if "application/json" in ctype:
        try:
            return json.loads(resp.body.decode("utf-8"))
        except ValueError:
            return resp.body
    return resp.body


def http_json(
    method: str,
    url: str,
    token: str | None,
    payload: Any = None,
    *,
    params: Dict[str, Any] | None = None,
    handle_error: bool = True,
) -> Any:
    """Perform an HTTP request and return parsed JSON or raw bytes."""
    resp = http_request(method, url, token, payload, params=params, handle_error=handle_error)
    return decode_body(resp)


def response_cookies(resp: HttpResponse) -> Dict[str, str]:
    """Collect ``Set-Cookie`` values of ``resp`` into a plain mapping."""
    jar: SimpleCookie = SimpleCookie()
    get_all = getattr(resp.headers, "get_all", None)
    raw = get_all("Set-Cookie") if get_all else [resp.headers.get("Set-Cookie")]
    for header in raw or []:
        if header:
            jar.load(header)
    return {name: morsel.value for name, morsel in jar.items()}


def _error_message(body: str) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or body
    return body


def _handle_http_error(e: HTTPError) -> None:
    message = _error_message(e.read().decode("utf-8", errors="ignore"))

    if e.code == 401:
        print(f"Authentication failed: {message}", file=sys.stderr)
    elif e.code == 403:
        print(
            f"Forbidden: {message} (does the session have the required permissions?)",
            file=sys.stderr,
        )
    elif e.code == 404:
        print(f"Not found: {message}", file=sys.stderr)
    else:
        print(f"[HTTP {e.code}] {message}", file=sys.stderr)
    sys.exit(2)
