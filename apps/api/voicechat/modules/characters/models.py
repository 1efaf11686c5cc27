from __future__ import annotations

from typing import Any, Optional

from pydantic import model_validator
from sqlmodel import SQLModel, Field

from voicechat.core.legacy import upgrade_record


class Character(SQLModel):
    id: str
    name: str
    image: Optional[str] = Field(default=None)  # /uploads/images/<file>

    created_at: str

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data: Any) -> Any:
        return upgrade_record(data, {})
