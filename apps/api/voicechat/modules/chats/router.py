from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from starlette.concurrency import run_in_threadpool

from voicechat.core.storage import DataStore
from voicechat.modules.auth.deps import current_user, get_store, privileged_user
from voicechat.modules.auth.models import User
from voicechat.modules.channel.hub import EVENT_STATE_CHANGED, ChannelHub, get_hub

from .schemas import ChatMessageOut, MessageCreateIn, ReplyIn
from .service import attach_reply, get_message, list_messages, post_message

router = APIRouter(tags=["chats"])


@router.get("/chats", response_model=List[ChatMessageOut])
def api_list_chats(
    character_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="waiting|ready"),
    user: User = Depends(current_user),
    store: DataStore = Depends(get_store),
) -> Any:
    return list_messages(store, character_id=character_id, status=status)


@router.get("/chats/{message_id}", response_model=ChatMessageOut)
def api_get_chat(message_id: str, user: User = Depends(current_user), store: DataStore = Depends(get_store)) -> Any:
    return get_message(store, message_id)


@router.post("/chats", response_model=ChatMessageOut)
async def api_post_chat(
    body: Optional[MessageCreateIn] = None,
    user: User = Depends(current_user),
    store: DataStore = Depends(get_store),
    hub: ChannelHub = Depends(get_hub),
) -> Any:
    body = body or MessageCreateIn()
    msg = await run_in_threadpool(post_message, store, body.character_id, body.text)
    await hub.broadcast(EVENT_STATE_CHANGED)
    return msg


@router.post("/chats/{message_id}/reply", response_model=ChatMessageOut)
async def api_reply(
    message_id: str,
    body: Optional[ReplyIn] = None,
    user: User = Depends(privileged_user),
    store: DataStore = Depends(get_store),
    hub: ChannelHub = Depends(get_hub),
) -> Any:
    body = body or ReplyIn()
    msg = await run_in_threadpool(attach_reply, store, user, message_id, body.text, body.audio)
    await hub.broadcast(EVENT_STATE_CHANGED)
    return msg
