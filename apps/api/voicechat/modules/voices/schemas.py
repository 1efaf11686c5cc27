from __future__ import annotations

from pydantic import BaseModel, computed_field

from voicechat.core.storage import AUDIO_DIR


class VoiceRecordingOut(BaseModel):
    id: str
    filename: str
    user_id: str
    created_at: str

    @computed_field  # type: ignore[misc]
    @property
    def url(self) -> str:
        return f"/uploads/{AUDIO_DIR}/{self.filename}"
