from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from voicechat.core.errors import ValidationError
from voicechat.core.storage import DataStore
from voicechat.modules.auth.deps import current_user, get_store, privileged_user
from voicechat.modules.auth.models import User
from voicechat.modules.channel.hub import EVENT_VOICE_PENDING, ChannelHub, get_hub
from voicechat.modules.characters.schemas import CharacterOut

from .schemas import VoiceRecordingOut
from .service import list_voices, store_character_image, store_voice

router = APIRouter(tags=["uploads"])


@router.post("/upload/voice", response_model=VoiceRecordingOut)
async def api_upload_voice(
    audio: Optional[UploadFile] = File(None),
    user: User = Depends(current_user),
    store: DataStore = Depends(get_store),
    hub: ChannelHub = Depends(get_hub),
) -> Any:
    if audio is None:
        raise ValidationError("audio file is required", code="missing_file")
    data = await audio.read()
    rec = await run_in_threadpool(store_voice, store, user, audio.filename, data)
    await hub.broadcast(EVENT_VOICE_PENDING)
    return rec


@router.post("/upload/character-image", response_model=CharacterOut)
async def api_upload_character_image(
    image: Optional[UploadFile] = File(None),
    char_id: Optional[str] = Form(None, alias="charId"),
    char_id_snake: Optional[str] = Form(None, alias="char_id"),
    user: User = Depends(current_user),
    store: DataStore = Depends(get_store),
) -> Any:
    char_id = char_id or char_id_snake
    if not char_id:
        raise ValidationError("charId is required", code="missing_fields")
    if image is None:
        raise ValidationError("image file is required", code="missing_file")
    data = await image.read()
    return await run_in_threadpool(store_character_image, store, char_id, image.filename, data)


@router.get("/voices", response_model=List[VoiceRecordingOut])
def api_list_voices(
    user_id: Optional[str] = Query(None),
    user: User = Depends(privileged_user),
    store: DataStore = Depends(get_store),
) -> Any:
    return list_voices(store, user_id=user_id)
