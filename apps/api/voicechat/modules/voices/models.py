from __future__ import annotations

from typing import Any

from pydantic import model_validator
from sqlmodel import SQLModel

from voicechat.core.legacy import upgrade_record


# append-only
class VoiceRecording(SQLModel):
    id: str
    filename: str
    user_id: str

    created_at: str

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data: Any) -> Any:
        return upgrade_record(data, {"userId": "user_id"})
