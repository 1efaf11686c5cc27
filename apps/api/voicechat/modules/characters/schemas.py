from __future__ import annotations

from typing import Optional
from pydantic import BaseModel


class CharacterCreateIn(BaseModel):
    # emptiness is checked by the service so it maps to 400, not 422
    name: Optional[str] = None


class CharacterOut(BaseModel):
    id: str
    name: str
    image: Optional[str] = None
    created_at: Optional[str] = None
