from __future__ import annotations

from typing import Any, MutableMapping

from voicechat.core.errors import AuthError, ConflictError, ForbiddenError, ValidationError
from voicechat.core.ids import new_ulid
from voicechat.core.observability import now_iso
from voicechat.core.storage import DataStore

from .models import ROLE_ULTIMATE, ROLE_USER, User

SESSION_KEY = "uid"
THEMES = ("dark", "light")


def register(store: DataStore, username: str, password: str) -> User:
    """
    Create a user. The first user ever stored becomes `ultimate`; users are
    never deleted, so an empty collection means "no user was ever created".
    """
    if not username or not password:
        raise ValidationError("username and password are required", code="missing_fields")

    with store.users.mutate() as users:
        if any(u.username == username for u in users):
            raise ConflictError("username already exists", code="username_taken")
        role = ROLE_ULTIMATE if len(users) == 0 else ROLE_USER
        user = User(
            id=new_ulid(),
            username=username,
            password=password,
            role=role,
            theme="dark",
            created_at=now_iso(),
        )
        users.append(user)
    return user.model_copy()


def authenticate(store: DataStore, username: str, password: str) -> User:
    for u in store.users.read():
        if u.username == username and u.password == password:
            return u
    raise AuthError("invalid username or password", code="invalid_credentials")


def resolve_session(store: DataStore, session: MutableMapping[str, Any]) -> User:
    uid = session.get(SESSION_KEY)
    if not uid:
        raise AuthError("not signed in")
    user = store.users.find(str(uid))
    if user is None:
        raise AuthError("session user no longer exists")
    return user


def require_privileged(user: User) -> None:
    if user.role != ROLE_ULTIMATE:
        raise ForbiddenError("ultimate role required")


def start_session(session: MutableMapping[str, Any], user: User) -> None:
    session.clear()
    session[SESSION_KEY] = user.id


def end_session(session: MutableMapping[str, Any]) -> None:
    session.clear()


def set_theme(store: DataStore, user_id: str, theme: str) -> User:
    if theme not in THEMES:
        raise ValidationError(f"theme must be one of {', '.join(THEMES)}", code="invalid_theme")
    with store.users.mutate() as users:
        for u in users:
            if u.id == user_id:
                u.theme = theme
                return u.model_copy()
        raise AuthError("session user no longer exists")
