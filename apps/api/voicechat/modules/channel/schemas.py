from __future__ import annotations

from typing import Literal, Optional
from pydantic import AliasChoices, BaseModel, Field


class SubmitMessageFrame(BaseModel):
    """Client asks to post a new message for a character."""

    type: Literal["submit-message"]
    character_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("characterId", "character_id"))
    text: Optional[str] = None


class SubmitReplyFrame(BaseModel):
    """Privileged client answers a waiting message."""

    type: Literal["submit-reply"]
    id: str
    text: Optional[str] = None
    audio: Optional[str] = None


class ErrorFrame(BaseModel):
    """Error payload returned to the sending client only."""

    type: Literal["error"] = "error"
    code: str
    message: str
