from __future__ import annotations

from typing import List, Optional

from voicechat.core.errors import NotFoundError, ValidationError
from voicechat.core.ids import new_ulid
from voicechat.core.observability import now_iso
from voicechat.core.storage import DataStore
from voicechat.modules.auth.models import User
from voicechat.modules.auth.service import require_privileged

from .models import SENDER_USER, STATUS_READY, STATUS_WAITING, ChatMessage


def list_messages(
    store: DataStore,
    character_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[ChatMessage]:
    items = store.chats.read()
    if character_id:
        items = [m for m in items if m.character_id == character_id]
    if status:
        items = [m for m in items if m.status == status]
    return items


def get_message(store: DataStore, message_id: str) -> ChatMessage:
    m = store.chats.find(message_id)
    if m is None:
        raise NotFoundError("message not found", details={"message_id": message_id})
    return m


def post_message(store: DataStore, character_id: Optional[str], text: Optional[str]) -> ChatMessage:
    """
    New message, always waiting / no audio / sent by `user`.

    character_id is stored as given; a dangling reference is accepted.
    """
    if not character_id:
        raise ValidationError("characterId is required", code="missing_fields")
    if not text or not text.strip():
        raise ValidationError("text is required", code="missing_text")

    msg = ChatMessage(
        id=new_ulid(),
        character_id=str(character_id),
        sender=SENDER_USER,
        text=text,
        audio=None,
        status=STATUS_WAITING,
        created_at=now_iso(),
    )
    with store.chats.mutate() as items:
        items.append(msg)
    return msg.model_copy()


def attach_reply(
    store: DataStore,
    user: User,
    message_id: str,
    text: Optional[str],
    audio: Optional[str] = None,
) -> ChatMessage:
    """
    waiting -> ready. Replying again to a ready message overwrites text and
    audio (last write wins); there is no way back to waiting.
    """
    require_privileged(user)
    if text is None and not audio:
        raise ValidationError("text or audio is required", code="missing_fields")

    with store.chats.mutate() as items:
        for m in items:
            if m.id == message_id:
                m.text = text or ""
                m.audio = audio or None
                m.status = STATUS_READY
                m.replied_at = now_iso()
                return m.model_copy()
        raise NotFoundError("message not found", details={"message_id": message_id})
