from email.message import Message
from io import BytesIO
from urllib.error import HTTPError

import pytest

from mm_e2e_cli.core import config, users
from mm_e2e_cli.core.http import HttpResponse

BASE = "http://mm/api/v4"
UID = "a" * 26


class CallLog(list):
    responses: dict


@pytest.fixture
def log(monkeypatch):
    """Record http_json calls; responses are looked up by (method, path)."""
    recorded = CallLog()
    responses = {}

    def fake_http_json(method, url, token, payload=None, *, params=None, handle_error=True):
        path = url[len(BASE):]
        recorded.append((method, path, token, payload, params))
        return responses.get((method, path), {})

    monkeypatch.setattr(users, "http_json", fake_http_json)
    recorded.responses = responses
    return recorded


def _login_response(body=b'{"id":"uid1","username":"alice"}'):
    headers = Message()
    headers["Content-Type"] = "application/json"
    headers["Token"] = "sess-token"
    headers["Set-Cookie"] = "MMAUTHTOKEN=sess-token; Path=/"
    headers["Set-Cookie"] = "MMUSERID=uid1; Path=/"
    headers["Set-Cookie"] = "MMCSRF=csrf1; Path=/"
    return HttpResponse(200, headers, body)


def test_api_login_stores_session(monkeypatch):
    sent = {}

    def fake_http_request(method, url, token, payload=None, **_):
        sent.update(method=method, url=url, token=token, payload=payload)
        return _login_response()

    monkeypatch.setattr(users, "http_request", fake_http_request)
    out = users.api_login(BASE, {"username": "alice", "password": "secret"})
    assert out == {"user": {"id": "uid1", "username": "alice", "password": "secret"}}
    assert sent == {
        "method": "POST",
        "url": f"{BASE}/users/login",
        "token": None,
        "payload": {"login_id": "alice", "password": "secret"},
    }
    assert config.load_session() == {"token": "sess-token", "user_id": "uid1", "csrf": "csrf1"}


def test_api_login_without_token_exits(monkeypatch, capsys):
    headers = Message()
    headers["Content-Type"] = "application/json"
    monkeypatch.setattr(
        users, "http_request", lambda *a, **kw: HttpResponse(200, headers, b'{"id":"x"}')
    )
    with pytest.raises(SystemExit) as exc:
        users.api_login(BASE, {"username": "alice", "password": "secret"})
    assert exc.value.code == 2
    assert "session token" in capsys.readouterr().err


def test_api_admin_login_uses_configured_admin(monkeypatch):
    seen = {}
    monkeypatch.setenv("MM_E2E_ADMIN_USERNAME", "boss")
    monkeypatch.setenv("MM_E2E_ADMIN_PASSWORD", "pw")

    def fake_login(base, user):
        seen.update(user)
        return {"user": {"username": user["username"]}}

    monkeypatch.setattr(users, "api_login", fake_login)
    assert users.api_admin_login(BASE) == {"user": {"username": "boss"}}
    assert seen["password"] == "pw"


def test_api_logout_clears_session_even_on_failure(monkeypatch):
    config.save_session("tok", "uid", None)

    def failing(*a, **kw):
        raise SystemExit(2)

    monkeypatch.setattr(users, "http_json", failing)
    with pytest.raises(SystemExit):
        users.api_logout(BASE, "tok")
    assert config.load_session() == {}


def test_api_logout(log):
    config.save_session("tok", "uid", None)
    log.responses[("POST", "/users/logout")] = {"status": "OK"}
    assert users.api_logout(BASE, "tok") == {"data": {"status": "OK"}}
    assert log[0][:3] == ("POST", "/users/logout", "tok")
    assert config.load_session() == {}


def test_lookup_endpoints(log):
    log.responses[("GET", "/users/me")] = {"id": "me1"}
    log.responses[("GET", "/users/email/a%40b.com")] = {"id": "u2"}
    log.responses[("POST", "/users/usernames")] = [{"id": "u3"}]
    assert users.api_get_me(BASE, "t") == {"user": {"id": "me1"}}
    assert users.api_get_user_by_email(BASE, "t", "a@b.com") == {"user": {"id": "u2"}}
    assert users.api_get_users_by_usernames(BASE, "t", ("bob",)) == {"users": [{"id": "u3"}]}
    assert log[2][3] == ["bob"]


def test_patch_user_and_me(log):
    log.responses[("PUT", f"/users/{UID}/patch")] = {"id": UID, "locale": "fr"}
    log.responses[("PUT", "/users/me/patch")] = {"id": "me", "locale": "en"}
    assert users.api_patch_user(BASE, "t", UID, {"locale": "fr"})["user"]["locale"] == "fr"
    assert users.api_patch_me(BASE, "t", {"locale": "en"})["user"]["locale"] == "en"
    assert [c[3] for c in log] == [{"locale": "fr"}, {"locale": "en"}]


def test_create_user_random_bypasses_tutorial(log, monkeypatch):
    monkeypatch.setattr(users, "generate_random_user", lambda prefix: {
        "username": f"{prefix}xyz", "password": "passwd", "email": f"{prefix}xyz@x"
    })
    log.responses[("POST", "/users")] = {"id": "new1", "username": "testerxyz"}
    out = users.api_create_user(BASE, "t", prefix="tester")
    assert out == {"user": {"id": "new1", "username": "testerxyz", "password": "passwd"}}
    assert log[0][1] == "/users"
    assert log[0][3]["username"] == "testerxyz"
    assert log[1][:2] == ("PUT", "/users/new1/preferences")
    assert log[1][3] == [
        {"user_id": "new1", "category": "tutorial_step", "name": "new1", "value": "999"}
    ]


def test_create_user_predefined_without_tutorial_bypass(log):
    log.responses[("POST", "/users")] = {"id": "new2"}
    user = {"username": "fixed", "password": "pw", "email": "fixed@x"}
    out = users.api_create_user(BASE, "t", user=user, bypass_tutorial=False)
    assert out["user"]["password"] == "pw"
    assert len(log) == 1
    assert log[0][3] == user


def test_create_admin_default_account(log):
    log.responses[("POST", "/users")] = {"id": "adm"}
    out = users.api_create_admin(BASE, bypass_tutorial=False)
    payload = log[0][3]
    assert payload["username"] == config.DEFAULT_ADMIN["username"]
    assert payload["first_name"] == "Kenneth"
    assert payload["last_name"] == "Moreno"
    assert out == {"sysadmin": {"id": "adm", "password": config.DEFAULT_ADMIN["password"]}}


def test_create_admin_with_prefix(log):
    log.responses[("POST", "/users")] = {"id": "adm2"}
    users.api_create_admin(BASE, "t", name_prefix="boss")
    payload = log[0][3]
    assert payload["username"].startswith("boss")
    assert payload["username"] != "boss"
    assert payload["email"].endswith("@sample.mattermost.com")
    assert log[1][1] == "/users/adm2/preferences"


def test_create_guest_user(log):
    log.responses[("POST", "/users")] = {"id": "g1"}
    out = users.api_create_guest_user(BASE, "t", bypass_tutorial=False)
    assert out["guest"]["id"] == "g1"
    assert log[0][3]["username"].startswith("guest")
    assert [c[:2] for c in log[1:]] == [
        ("POST", "/users/g1/demote"),
        ("PUT", "/users/g1/active"),
    ]
    assert log[2][3] == {"active": True}


def test_create_guest_user_not_activated(log):
    log.responses[("POST", "/users")] = {"id": "g2"}
    users.api_create_guest_user(BASE, "t", activate=False, bypass_tutorial=False)
    assert [c[:2] for c in log] == [
        ("POST", "/users"),
        ("POST", "/users/g2/demote"),
        ("PUT", "/users/g2/active"),
    ]
    assert log[2][3] == {"active": False}


def test_revoke_and_deactivate(log):
    log.responses[("POST", f"/users/{UID}/sessions/revoke/all")] = {"status": "OK"}
    assert users.api_revoke_user_sessions(BASE, "t", UID) == {"data": {"status": "OK"}}
    users.api_deactivate_user(BASE, "t", UID)
    assert log[1][:2] == ("DELETE", f"/users/{UID}")


def test_users_not_in_team_defaults(log):
    log.responses[("GET", "/users")] = [{"id": "u1"}]
    out = users.api_get_users_not_in_team(BASE, "t", team_id="team1")
    assert out == {"users": [{"id": "u1"}]}
    assert log[0][4] == {"not_in_team": "team1", "page": 0, "per_page": 60}


def test_resolve_user_id(log):
    log.responses[("POST", "/users/usernames")] = [{"id": "bob-id", "username": "Bob"}]
    assert users.resolve_user_id(BASE, "t", UID) == UID
    assert users.resolve_user_id(BASE, "t", "me") == "me"
    assert users.resolve_user_id(BASE, "t", "bob") == "bob-id"


def test_resolve_user_id_unknown_email(monkeypatch, capsys):
    def fake_http_json(method, url, token, payload=None, **kw):
        raise HTTPError(url, 404, "Not Found", None, BytesIO(b"{}"))

    monkeypatch.setattr(users, "http_json", fake_http_json)
    with pytest.raises(SystemExit) as exc:
        users.resolve_user_id(BASE, "t", "ghost@example.com")
    assert exc.value.code == 1
    assert "User not found: ghost@example.com" in capsys.readouterr().err


def test_fetch_all_users_pages(monkeypatch):
    pages = {0: [{"id": "a"}, {"id": "b"}], 1: [{"id": "c"}, {"id": "d"}], 2: [{"id": "e"}]}
    seen = []

    def fake_http_json(method, url, token, payload=None, *, params=None, **kw):
        seen.append(params["page"])
        assert params["not_in_team"] == "team1"
        return pages.get(params["page"], [])

    monkeypatch.setattr("mm_e2e_cli.core.utils.http_json", fake_http_json)
    monkeypatch.setattr("mm_e2e_cli.core.utils.API_MAX_PER_PAGE", 2)
    out = users.fetch_all_users(BASE, "t", {"not_in_team": "team1"}, workers=2, desc=None)
    assert [u["id"] for u in out] == ["a", "b", "c", "d", "e"]
    assert sorted(seen)[:3] == [0, 1, 2]


def test_promote_guest_and_reactivate(log):
    users.api_promote_guest_to_user(BASE, "t", UID)
    users.api_activate_user(BASE, "t", UID, active=False)
    assert log[0][:2] == ("POST", f"/users/{UID}/promote")
    assert log[1][:2] == ("PUT", f"/users/{UID}/active")
    assert log[1][3] == {"active": False}


def test_create_admin_without_session_logs_in_for_tutorial(log, monkeypatch):
    log.responses[("POST", "/users")] = {"id": "adm3"}

    def fake_login(base, user):
        config.save_session("admin-tok", "adm3", None)
        return {"user": {"id": "adm3"}}

    monkeypatch.setattr(users, "api_login", fake_login)
    users.api_create_admin(BASE)
    assert log[0][2] is None
    assert log[1][:3] == ("PUT", "/users/adm3/preferences", "admin-tok")


def test_api_login_non_json_body_keeps_session(monkeypatch):
    headers = Message()
    headers["Content-Type"] = "text/plain"
    headers["Token"] = "sess-token"
    monkeypatch.setattr(users, "http_request", lambda *a, **kw: HttpResponse(200, headers, b"ok"))
    out = users.api_login(BASE, {"username": "alice", "password": "secret"})
    assert out == {"user": {"password": "secret"}}
    assert config.load_session()["token"] == "sess-token"


def test_resolve_user_id_shaped_like_id_falls_back_to_username(monkeypatch):
    name = "b" * 26
    seen = []

    def fake_http_json(method, url, token, payload=None, **kw):
        seen.append((method, url[len(BASE):]))
        if url.endswith(f"/users/{name}"):
            raise HTTPError(url, 404, "Not Found", None, BytesIO(b"{}"))
        return [{"id": "real-id", "username": name}]

    monkeypatch.setattr(users, "http_json", fake_http_json)
    assert users.resolve_user_id(BASE, "t", name) == "real-id"
    assert seen == [("GET", f"/users/{name}"), ("POST", "/users/usernames")]
