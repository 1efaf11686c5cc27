from __future__ import annotations

from typing import Dict, Tuple

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from voicechat.core.storage import DataStore

from .deps import current_user, get_store
from .models import User
from .schemas import LogoutOut, ThemeIn, UserOut
from .service import authenticate, end_session, register, set_theme, start_session

router = APIRouter(tags=["auth"])

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _credentials(request: Request) -> Tuple[str, str]:
    # plain HTML forms and JSON clients are both accepted
    ctype = request.headers.get("content-type", "")
    body: Dict[str, object] = {}
    if ctype.startswith(_FORM_TYPES):
        form = await request.form()
        body = {k: form.get(k) for k in ("username", "password")}
    else:
        try:
            raw = await request.json()
        except ValueError:
            raw = {}
        if isinstance(raw, dict):
            body = raw

    def _s(key: str) -> str:
        v = body.get(key)
        return v if isinstance(v, str) else ""

    return _s("username"), _s("password")


@router.post("/signup", response_model=UserOut)
async def api_signup(request: Request, store: DataStore = Depends(get_store)) -> User:
    username, password = await _credentials(request)
    user = await run_in_threadpool(register, store, username, password)
    start_session(request.session, user)
    return user


@router.post("/login", response_model=UserOut)
async def api_login(request: Request, store: DataStore = Depends(get_store)) -> User:
    username, password = await _credentials(request)
    user = await run_in_threadpool(authenticate, store, username, password)
    start_session(request.session, user)
    return user


@router.post("/logout", response_model=LogoutOut)
def api_logout(request: Request, user: User = Depends(current_user)) -> LogoutOut:
    end_session(request.session)
    return LogoutOut()


@router.get("/me", response_model=UserOut)
def api_me(user: User = Depends(current_user)) -> User:
    return user


@router.patch("/me/theme", response_model=UserOut)
def api_set_theme(body: ThemeIn, user: User = Depends(current_user), store: DataStore = Depends(get_store)) -> User:
    return set_theme(store, user.id, body.theme)
