from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from voicechat.core.errors import AuthError, ConflictError, ForbiddenError, ValidationError
from voicechat.core.storage import DataStore
from voicechat.modules.auth import service as auth_service
from voicechat.modules.auth.models import ROLE_ULTIMATE, ROLE_USER


def test_first_signup_is_ultimate_rest_are_users(make_client, signup):
    alice = signup(make_client(), "alice", "pw1")
    bob = signup(make_client(), "bob", "pw2")
    carol = signup(make_client(), "carol", "pw3")

    assert alice["role"] == "ultimate"
    assert bob["role"] == "user"
    assert carol["role"] == "user"
    assert "password" not in alice
    assert alice["theme"] == "dark"


def test_signup_sets_session(client, signup):
    signup(client, "alice")
    r = client.get("/me")
    assert r.status_code == 200
    assert r.json()["username"] == "alice"


def test_signup_accepts_form_body(client):
    r = client.post("/signup", data={"username": "alice", "password": "pw"})
    assert r.status_code == 200
    assert r.json()["role"] == "ultimate"


@pytest.mark.parametrize("body", [{}, {"username": "alice"}, {"password": "pw"}, {"username": "", "password": "pw"}])
def test_signup_missing_fields_is_400(client, body):
    r = client.post("/signup", json=body)
    assert r.status_code == 400
    assert r.json()["error"] == "missing_fields"


def test_signup_duplicate_username_is_409(make_client, signup):
    signup(make_client(), "alice")
    r = make_client().post("/signup", json={"username": "alice", "password": "other"})
    assert r.status_code == 409
    assert r.json()["error"] == "username_taken"


def test_username_match_is_case_sensitive(make_client, signup):
    signup(make_client(), "alice")
    assert signup(make_client(), "Alice")["role"] == "user"


def test_login_success_and_failure(make_client, signup):
    signup(make_client(), "alice", "pw1")

    c = make_client()
    assert c.post("/login", json={"username": "alice", "password": "nope"}).status_code == 401
    assert c.get("/me").status_code == 401

    r = c.post("/login", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 200
    assert c.get("/me").json()["username"] == "alice"


def test_invalid_credentials_envelope(client):
    r = client.post("/login", json={"username": "ghost", "password": "x"}, headers={"X-Request-Id": "RID1"})
    body = r.json()
    assert r.status_code == 401
    assert body["error"] == "invalid_credentials"
    assert body["request_id"] == "RID1"
    assert r.headers["X-Request-Id"] == "RID1"


def test_logout_clears_session(client, signup):
    signup(client, "alice")
    assert client.post("/logout").status_code == 200
    assert client.get("/me").status_code == 401
    assert client.post("/logout").status_code == 401


def test_set_theme_persists(client, signup, store):
    user = signup(client, "alice")
    r = client.patch("/me/theme", json={"theme": "light"})
    assert r.status_code == 200
    assert r.json()["theme"] == "light"
    assert store.users.find(user["id"]).theme == "light"


def test_register_is_serialized_under_concurrency(tmp_path):
    store = DataStore(data_root=tmp_path, uploads_root=tmp_path / "uploads").open()

    def _reg(i: int):
        return auth_service.register(store, f"user{i}", "pw")

    with ThreadPoolExecutor(max_workers=16) as ex:
        users = list(ex.map(_reg, range(64)))

    roles = [u.role for u in users]
    assert roles.count(ROLE_ULTIMATE) == 1
    assert roles.count(ROLE_USER) == 63
    assert len({u.id for u in users}) == 64

    reloaded = DataStore(data_root=tmp_path, uploads_root=tmp_path / "uploads").open()
    assert len(reloaded.users) == 64


def test_service_errors(tmp_path):
    store = DataStore(data_root=tmp_path, uploads_root=tmp_path / "uploads").open()
    alice = auth_service.register(store, "alice", "pw")
    bob = auth_service.register(store, "bob", "pw")

    with pytest.raises(ValidationError):
        auth_service.register(store, "", "pw")
    with pytest.raises(ConflictError):
        auth_service.register(store, "alice", "pw")
    with pytest.raises(AuthError):
        auth_service.authenticate(store, "alice", "wrong")
    with pytest.raises(AuthError):
        auth_service.resolve_session(store, {})
    with pytest.raises(AuthError):
        auth_service.resolve_session(store, {"uid": "missing"})
    with pytest.raises(ForbiddenError):
        auth_service.require_privileged(bob)

    auth_service.require_privileged(alice)
    assert auth_service.resolve_session(store, {"uid": bob.id}).username == "bob"


def test_set_theme_for_vanished_user_writes_nothing(tmp_path, monkeypatch):
    store = DataStore(data_root=tmp_path, uploads_root=tmp_path / "uploads").open()
    auth_service.register(store, "alice", "pw")
    saves = []
    monkeypatch.setattr(store.users, "save", lambda: saves.append(1))

    with pytest.raises(AuthError):
        auth_service.set_theme(store, "missing", "light")
    assert saves == []
