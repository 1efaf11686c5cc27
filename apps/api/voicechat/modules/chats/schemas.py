from __future__ import annotations

from typing import Literal, Optional
from pydantic import AliasChoices, BaseModel, Field

MessageStatus = Literal["waiting", "ready"]


class MessageCreateIn(BaseModel):
    character_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("characterId", "character_id"))
    text: Optional[str] = None


class ReplyIn(BaseModel):
    text: Optional[str] = None
    audio: Optional[str] = None  # relative asset path, e.g. /uploads/audio/<file>


class ChatMessageOut(BaseModel):
    id: str
    character_id: str
    sender: str
    text: str
    audio: Optional[str] = None
    status: MessageStatus
    created_at: str
    replied_at: Optional[str] = None
