from __future__ import annotations

from typing import Any

from pydantic import model_validator
from sqlmodel import SQLModel, Field

from voicechat.core.legacy import upgrade_record

ROLE_ULTIMATE = "ultimate"
ROLE_USER = "user"


class User(SQLModel):
    id: str
    username: str
    password: str  # stored and compared as given
    role: str  # ultimate|user
    theme: str = Field(default="dark")  # dark|light

    created_at: str

    @model_validator(mode="before")
    @classmethod
    def _legacy(cls, data: Any) -> Any:
        return upgrade_record(data, {})
