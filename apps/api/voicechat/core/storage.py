"""
Flat-file JSON persistence.

Defaults:
- DATA_ROOT: ./data            (users.json, characters.json, chats.json, voices.json)
- UPLOADS_ROOT: ./data/uploads (audio/, images/)

Each collection is read whole on open and rewritten whole on every mutation.
No transactions: the per-collection lock serializes writers inside this
process only.
"""
from __future__ import annotations

import json
import os
import shutil
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlmodel import SQLModel

from .errors import InternalError
from .observability import emit

T = TypeVar("T", bound=SQLModel)

AUDIO_DIR = "audio"
IMAGES_DIR = "images"


def get_data_root() -> Path:
    return Path(os.getenv("DATA_ROOT", "./data")).resolve()


def get_uploads_root() -> Path:
    return Path(os.getenv("UPLOADS_ROOT", "./data/uploads")).resolve()


def load_json(path: Path, default: Any) -> Any:
    """Parsed file contents, or `default` when the file is missing or unreadable."""
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return default


def save_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


class JsonCollection(Generic[T]):
    def __init__(self, name: str, path: Path, model: Type[T]) -> None:
        self.name = name
        self.path = path
        self.model = model
        self._lock = threading.RLock()
        self._items: List[T] = []

    def load(self) -> List[T]:
        """
        Missing file -> empty. An unparsable or non-array file loads empty; a
        record that fails validation is skipped on its own. Whenever anything
        is dropped the file is first copied aside to `<name>.json.corrupt`.
        """
        raw = load_json(self.path, None)
        items: List[T] = []
        if raw is None:
            if self.path.exists():
                self._quarantine("unparsable file, starting empty")
        elif not isinstance(raw, list):
            self._quarantine("not a JSON array, starting empty")
        else:
            skipped = 0
            for i, r in enumerate(raw):
                try:
                    items.append(self.model.model_validate(r))
                except PydanticValidationError as e:
                    skipped += 1
                    emit("warning", "store.load.skip", "invalid record skipped", None, __name__,
                         collection=self.name, index=i, errors=e.error_count())
            if skipped:
                self._quarantine(f"{skipped} invalid record(s) skipped", kept=len(items))
        with self._lock:
            self._items = items
        return self.read()

    def _quarantine(self, reason: str, **extra: Any) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            shutil.copyfile(self.path, backup)
        except OSError as e:
            emit("error", "store.load.quarantine_failed", str(e), None, __name__, collection=self.name)
            return
        emit("warning", "store.load.fallback", reason, None, __name__,
             collection=self.name, backup=str(backup.as_posix()), **extra)

    def save(self) -> None:
        with self._lock:
            payload = [m.model_dump(mode="json") for m in self._items]
            try:
                save_json(self.path, payload)
            except OSError as e:
                emit("error", "store.save.error", str(e), None, __name__, collection=self.name)
                raise InternalError(
                    "failed to persist collection",
                    details={"collection": self.name, "type": type(e).__name__},
                ) from e

    def read(self) -> List[T]:
        with self._lock:
            return [m.model_copy() for m in self._items]

    def find(self, item_id: str) -> Optional[T]:
        with self._lock:
            for m in self._items:
                if m.id == item_id:
                    return m.model_copy()
        return None

    @contextmanager
    def mutate(self) -> Iterator[List[T]]:
        """
        Hold the lock across read-modify-persist.

        The live list is yielded; it is flushed to disk when the block exits
        cleanly; an exception raised inside the block skips the flush. Any
        exception (including a failed flush) restores the in-memory state
        that was present on entry.
        """
        with self._lock:
            backup = [m.model_copy(deep=True) for m in self._items]
            try:
                yield self._items
                self.save()
            except BaseException:
                self._items = backup
                raise

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class DataStore:
    """The four independent collections backing the service."""

    def __init__(self, data_root: Optional[Path] = None, uploads_root: Optional[Path] = None) -> None:
        # local imports: modules depend on core, not the other way round
        from voicechat.modules.auth.models import User
        from voicechat.modules.characters.models import Character
        from voicechat.modules.chats.models import ChatMessage
        from voicechat.modules.voices.models import VoiceRecording

        self.data_root = Path(data_root) if data_root is not None else get_data_root()
        self.uploads_root = Path(uploads_root) if uploads_root is not None else get_uploads_root()

        self.users: JsonCollection[User] = JsonCollection("users", self.data_root / "users.json", User)
        self.characters: JsonCollection[Character] = JsonCollection(
            "characters", self.data_root / "characters.json", Character
        )
        self.chats: JsonCollection[ChatMessage] = JsonCollection("chats", self.data_root / "chats.json", ChatMessage)
        self.voices: JsonCollection[VoiceRecording] = JsonCollection(
            "voices", self.data_root / "voices.json", VoiceRecording
        )

    def open(self) -> "DataStore":
        for c in self.collections():
            c.load()
        return self

    def collections(self) -> List[JsonCollection[Any]]:
        return [self.users, self.characters, self.chats, self.voices]

    def upload_dir(self, kind: str) -> Path:
        return self.uploads_root / kind

    def ensure_upload_dirs(self) -> None:
        for kind in (AUDIO_DIR, IMAGES_DIR):
            self.upload_dir(kind).mkdir(parents=True, exist_ok=True)

    def write_upload(self, kind: str, filename: str, data: bytes) -> Path:
        target = self.upload_dir(kind) / filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            emit("error", "store.upload.error", str(e), None, __name__, kind=kind)
            raise InternalError("failed to store upload", details={"kind": kind, "type": type(e).__name__}) from e
        return target


def storage_health(store: DataStore) -> Dict[str, Any]:
    try:
        root = store.data_root
        root.mkdir(parents=True, exist_ok=True)
        marker = root / ".write_check"
        marker.write_text("ok", encoding="utf-8")
        try:
            marker.unlink()
        except OSError:
            pass
        counts = {c.name: len(c) for c in store.collections()}
        return {"status": "ok", "kind": "json_files", "root": str(root.as_posix()), "collections": counts}
    except Exception as e:
        return {"status": "error", "kind": "json_files", "root": str(store.data_root.as_posix()), "error": str(e)}
