from __future__ import annotations

from typing import List, Optional

from voicechat.core.errors import NotFoundError, ValidationError
from voicechat.core.ids import new_ulid
from voicechat.core.observability import now_iso
from voicechat.core.storage import DataStore

from .models import Character


def list_characters(store: DataStore) -> List[Character]:
    return store.characters.read()


def get_character(store: DataStore, character_id: str) -> Character:
    c = store.characters.find(character_id)
    if c is None:
        raise NotFoundError("character not found", details={"character_id": character_id})
    return c


def create_character(store: DataStore, name: Optional[str]) -> Character:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required", code="missing_name")

    c = Character(id=new_ulid(), name=name, image=None, created_at=now_iso())
    with store.characters.mutate() as items:
        items.append(c)
    return c.model_copy()


def attach_image(store: DataStore, character_id: str, image_ref: str) -> Character:
    with store.characters.mutate() as items:
        for c in items:
            if c.id == character_id:
                c.image = image_ref
                return c.model_copy()
        raise NotFoundError("character not found", details={"character_id": character_id})
