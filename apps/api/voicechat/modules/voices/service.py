from __future__ import annotations

import re
import uuid
from pathlib import PurePath
from typing import List, Optional

from voicechat.core.errors import ValidationError
from voicechat.core.ids import new_ulid
from voicechat.core.observability import now_iso
from voicechat.core.storage import AUDIO_DIR, IMAGES_DIR, DataStore
from voicechat.modules.auth.models import User
from voicechat.modules.characters.models import Character
from voicechat.modules.characters.service import attach_image, get_character

from .models import VoiceRecording

UPLOADS_URL_PREFIX = "/uploads"

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,8}$")


def generated_filename(original: Optional[str]) -> str:
    """Random name; the client's extension is kept only when it is plain."""
    suffix = PurePath(original or "").suffix.lower()
    if not _SAFE_SUFFIX.match(suffix):
        suffix = ""
    return uuid.uuid4().hex + suffix


def asset_ref(kind: str, filename: str) -> str:
    return f"{UPLOADS_URL_PREFIX}/{kind}/{filename}"


def store_voice(store: DataStore, user: User, original_filename: Optional[str], data: bytes) -> VoiceRecording:
    if not data:
        raise ValidationError("audio file is empty", code="missing_file")
    name = generated_filename(original_filename)
    store.write_upload(AUDIO_DIR, name, data)

    rec = VoiceRecording(id=new_ulid(), filename=name, user_id=user.id, created_at=now_iso())
    with store.voices.mutate() as items:
        items.append(rec)
    return rec.model_copy()


def list_voices(store: DataStore, user_id: Optional[str] = None) -> List[VoiceRecording]:
    items = store.voices.read()
    if user_id:
        items = [v for v in items if v.user_id == user_id]
    return items


def store_character_image(
    store: DataStore,
    character_id: str,
    original_filename: Optional[str],
    data: bytes,
) -> Character:
    # 404 before anything touches the images dir
    get_character(store, character_id)
    if not data:
        raise ValidationError("image file is empty", code="missing_file")

    name = generated_filename(original_filename)
    store.write_upload(IMAGES_DIR, name, data)
    return attach_image(store, character_id, asset_ref(IMAGES_DIR, name))
