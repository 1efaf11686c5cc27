from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Path

from voicechat.core.storage import DataStore
from voicechat.modules.auth.deps import current_user, get_store

from .schemas import CharacterCreateIn, CharacterOut
from .service import create_character, get_character, list_characters

router = APIRouter(tags=["characters"], dependencies=[Depends(current_user)])


@router.get("/characters", response_model=List[CharacterOut])
def api_list_characters(store: DataStore = Depends(get_store)) -> Any:
    return list_characters(store)


@router.post("/characters", response_model=CharacterOut)
def api_create_character(body: Optional[CharacterCreateIn] = None, store: DataStore = Depends(get_store)) -> Any:
    return create_character(store, body.name if body else None)


@router.get("/characters/{character_id}", response_model=CharacterOut)
def api_get_character(character_id: str = Path(...), store: DataStore = Depends(get_store)) -> Any:
    return get_character(store, character_id)
