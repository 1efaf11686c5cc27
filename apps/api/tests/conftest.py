from __future__ import annotations

from typing import Any, Callable, Dict

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from voicechat.core.storage import DataStore
from voicechat.main import create_app


@pytest.fixture
def app(tmp_path) -> FastAPI:
    return create_app(
        data_root=tmp_path / "data",
        uploads_root=tmp_path / "uploads",
        session_secret="test-secret",
    )


@pytest.fixture
def store(app: FastAPI) -> DataStore:
    return app.state.store


@pytest.fixture
def make_client(app: FastAPI) -> Callable[[], TestClient]:
    def _make() -> TestClient:
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def signup() -> Callable[..., Dict[str, Any]]:
    def _signup(c: TestClient, username: str, password: str = "pw") -> Dict[str, Any]:
        r = c.post("/signup", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return r.json()

    return _signup


@pytest.fixture
def ultimate_client(make_client, signup) -> TestClient:
    c = make_client()
    signup(c, "alice", "pw1")
    return c


@pytest.fixture
def user_client(ultimate_client, make_client, signup) -> TestClient:
    c = make_client()
    signup(c, "bob", "pw2")
    return c
