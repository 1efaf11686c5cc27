"""
Structured stdout events + logging bootstrap.

Contract locks:
- event line keys: ts, level, message, request_id, event, module
- error envelope keys: error, message, request_id, details
"""
from __future__ import annotations

import datetime
import json
import logging
import os
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

_log = logging.getLogger("voicechat")
if not _log.handlers:
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

# feeds /health last_error_summary
_last_error: Dict[str, Optional[str]] = {"summary": None}


def now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def emit(level: str, event: str, message: str, request_id: Optional[str], module: str, **extra: Any) -> None:
    payload: Dict[str, Any] = {
        "ts": now_iso(),
        "level": level.lower(),
        "message": message,
        "request_id": request_id,
        "event": event,
        "module": module,
    }
    payload.update(extra)
    print(json.dumps(payload, ensure_ascii=False), flush=True)
    if level.lower() == "error":
        _last_error["summary"] = f"{event}: {message}"


def last_error_summary() -> Optional[str]:
    return _last_error["summary"]


def err_envelope(error: str, message: str, request_id: Optional[str], details: Any, status_code: int) -> JSONResponse:
    headers = {}
    if request_id:
        headers["X-Request-Id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id,
            "details": details,
        },
        headers=headers,
    )
