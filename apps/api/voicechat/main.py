from __future__ import annotations

import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from voicechat.core.errors import ChatError
from voicechat.core.observability import emit, err_envelope, last_error_summary
from voicechat.core.storage import DataStore, storage_health
from voicechat.modules.auth.router import router as auth_router
from voicechat.modules.channel.hub import ChannelHub
from voicechat.modules.channel.router import router as channel_router
from voicechat.modules.characters.router import router as characters_router
from voicechat.modules.chats.router import router as chats_router
from voicechat.modules.voices.router import router as voices_router

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")
DEFAULT_SESSION_SECRET = "dev-secret-change-me"


def get_session_secret() -> str:
    return os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)


# === OBSERVABILITY FOUNDATIONS ===
# Contract locks:
# - /health keys: status, version, storage, last_error_summary
# - X-Request-Id in/out (missing -> generated; always echoed back; also on errors)
# - Error envelope keys: error, message, request_id, details
def _install_observability(app: FastAPI) -> None:
    @app.middleware("http")
    async def _request_id_mw(request: Request, call_next):
        rid = request.headers.get("X-Request-Id") or uuid.uuid4().hex.upper()
        request.state.request_id = rid
        emit("info", "http.request.start", f"{request.method} {request.url.path}", rid, __name__)
        try:
            resp = await call_next(request)
        except Exception as e:
            emit("error", "http.request.exception", str(e), rid, __name__)
            raise
        resp.headers["X-Request-Id"] = rid
        emit("info", "http.request.end", f"{request.method} {request.url.path} -> {getattr(resp,'status_code',None)}", rid, __name__)
        return resp

    @app.exception_handler(ChatError)
    async def _chat_exc_handler(request: Request, exc: ChatError):
        rid = getattr(request.state, "request_id", None)
        if exc.status_code >= 500:
            emit("error", "http.request.failed", exc.message, rid, __name__, code=exc.code)
        return err_envelope(exc.code, exc.message, rid, exc.details, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        rid = getattr(request.state, "request_id", None)
        return err_envelope("http_error", str(exc.detail), rid, {"status_code": exc.status_code}, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_exc_handler(request: Request, exc: RequestValidationError):
        rid = getattr(request.state, "request_id", None)
        return err_envelope("validation_error", "request validation failed", rid, exc.errors(), 422)

    @app.exception_handler(Exception)
    async def _unhandled_exc_handler(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", None)
        emit("error", "http.request.unhandled", str(exc), rid, __name__, type=type(exc).__name__)
        return err_envelope("internal_error", "internal server error", rid, {"type": type(exc).__name__}, 500)
# === END OBSERVABILITY FOUNDATIONS ===


def create_app(
    data_root: Optional[Path] = None,
    uploads_root: Optional[Path] = None,
    session_secret: Optional[str] = None,
) -> FastAPI:
    store = DataStore(data_root=data_root, uploads_root=uploads_root).open()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # /uploads is served from these; created at startup, never on import
        store.ensure_upload_dirs()
        yield

    app = FastAPI(title="Voice Chat API", version=APP_VERSION, lifespan=lifespan)
    app.state.store = store
    app.state.hub = ChannelHub()

    app.add_middleware(SessionMiddleware, secret_key=session_secret or get_session_secret(), same_site="lax")
    _install_observability(app)

    app.include_router(auth_router)
    app.include_router(characters_router)
    app.include_router(chats_router)
    app.include_router(voices_router)
    app.include_router(channel_router)

    app.mount("/uploads", StaticFiles(directory=str(store.uploads_root), check_dir=False), name="uploads")

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "version": APP_VERSION,
            "storage": storage_health(app.state.store),
            "last_error_summary": last_error_summary(),
        }

    return app


app = create_app()
