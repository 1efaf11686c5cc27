from __future__ import annotations

from typing import Any, Mapping

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from voicechat.core.errors import AuthError, ChatError
from voicechat.core.observability import emit
from voicechat.core.storage import DataStore
from voicechat.modules.auth.models import User
from voicechat.modules.auth.service import resolve_session
from voicechat.modules.chats.service import attach_reply, post_message

from .hub import EVENT_STATE_CHANGED, ChannelHub
from .schemas import ErrorFrame, SubmitMessageFrame, SubmitReplyFrame

router = APIRouter(tags=["channel"])

CLOSE_UNAUTHENTICATED = 4401


async def _send_error(websocket: WebSocket, code: str, message: str) -> None:
    await websocket.send_json(ErrorFrame(code=code, message=message).model_dump(mode="json"))


async def _dispatch(websocket: WebSocket, payload: Mapping[str, Any], user: User, store: DataStore, hub: ChannelHub) -> None:
    message_type = payload.get("type")

    if message_type == "submit-message":
        frame = SubmitMessageFrame.model_validate(payload)
        await run_in_threadpool(post_message, store, frame.character_id, frame.text)
        await hub.broadcast(EVENT_STATE_CHANGED)
        return

    if message_type == "submit-reply":
        # same ultimate-only rule as POST /chats/{id}/reply
        frame = SubmitReplyFrame.model_validate(payload)
        await run_in_threadpool(attach_reply, store, user, frame.id, frame.text, frame.audio)
        await hub.broadcast(EVENT_STATE_CHANGED)
        return

    if message_type == "ping":
        await websocket.send_json({"type": "pong"})
        return

    await _send_error(websocket, "unknown-event", f"unsupported event type: {message_type!r}")


@router.websocket("/ws")
async def channel_endpoint(websocket: WebSocket) -> None:
    store: DataStore = websocket.app.state.store
    hub: ChannelHub = websocket.app.state.hub

    try:
        user = await run_in_threadpool(resolve_session, store, websocket.session)
    except AuthError:
        await websocket.close(code=CLOSE_UNAUTHENTICATED)
        return

    await websocket.accept()
    hub.subscribe(websocket)
    emit("info", "channel.connect", f"user {user.username}", None, __name__, subscribers=len(hub))

    try:
        while True:
            try:
                payload = await websocket.receive_json()
            except WebSocketDisconnect:
                break
            except ValueError:
                await _send_error(websocket, "invalid-message", "Payload must be JSON.")
                continue

            if not isinstance(payload, Mapping):
                await _send_error(websocket, "invalid-message", "Payload must be a JSON object.")
                continue

            try:
                await _dispatch(websocket, payload, user, store, hub)
            except PydanticValidationError as e:
                await _send_error(websocket, "invalid-message", f"{e.error_count()} invalid field(s)")
            except ChatError as e:
                emit("info", "channel.event.rejected", e.message, None, __name__,
                     code=e.code, event_type=str(payload.get("type")))
                await websocket.send_json(e.as_frame())
    finally:
        hub.unsubscribe(websocket)
        emit("info", "channel.disconnect", f"user {user.username}", None, __name__, subscribers=len(hub))
