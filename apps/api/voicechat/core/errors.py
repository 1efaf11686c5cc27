"""
Domain errors.

Every error is an HTTPException whose detail is a dict
{"error": <code>, "message": ..., "details": ...}; main.py unwraps it into
the response envelope, the channel turns it into an `error` frame.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException


class ChatError(HTTPException):
    status_code = 500
    default_code = "internal_error"

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None) -> None:
        self.code = code or self.default_code
        self.message = message
        self.details = details
        super().__init__(
            status_code=self.status_code,
            detail={"error": self.code, "message": message, "details": details},
        )

    def as_frame(self) -> Dict[str, Any]:
        return {"type": "error", "code": self.code, "message": self.message}


class ValidationError(ChatError):
    status_code = 400
    default_code = "missing_fields"


class AuthError(ChatError):
    status_code = 401
    default_code = "unauthenticated"


class ForbiddenError(ChatError):
    status_code = 403
    default_code = "forbidden"


class NotFoundError(ChatError):
    status_code = 404
    default_code = "not_found"


class ConflictError(ChatError):
    status_code = 409
    default_code = "conflict"


class InternalError(ChatError):
    status_code = 500
    default_code = "storage_error"
