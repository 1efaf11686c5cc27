from __future__ import annotations

from fastapi import Depends, Request
from starlette.requests import HTTPConnection

from voicechat.core.storage import DataStore

from .models import User
from .service import require_privileged, resolve_session


def get_store(conn: HTTPConnection) -> DataStore:
    return conn.app.state.store


def current_user(request: Request, store: DataStore = Depends(get_store)) -> User:
    return resolve_session(store, request.session)


def privileged_user(user: User = Depends(current_user)) -> User:
    require_privileged(user)
    return user
