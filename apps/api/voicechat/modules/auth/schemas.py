from __future__ import annotations

from typing import Literal
from pydantic import BaseModel

Role = Literal["ultimate", "user"]
Theme = Literal["dark", "light"]


class UserOut(BaseModel):
    # password is never serialized
    id: str
    username: str
    role: Role
    theme: Theme = "dark"
    created_at: str


class ThemeIn(BaseModel):
    theme: Theme


class LogoutOut(BaseModel):
    status: str = "signed_out"
