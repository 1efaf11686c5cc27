from __future__ import annotations

from typing import Any, Optional

from pydantic import model_validator
from sqlmodel import SQLModel, Field

from voicechat.core.legacy import upgrade_record

STATUS_WAITING = "waiting"
STATUS_READY = "ready"

SENDER_USER = "user"


# waiting -> ready is the only transition; ready is terminal
class ChatMessage(SQLModel):
    id: str
    character_id: str  # not checked against characters
    sender: str = Field(default=SENDER_USER)
    text: str
    audio: Optional[str] = Field(default=None)
    status: str = Field(default=STATUS_WAITING)  # waiting|ready

    created_at: str
    replied_at: Optional[str] = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data: Any) -> Any:
        return upgrade_record(data, {"charId": "character_id", "from": "sender"})
