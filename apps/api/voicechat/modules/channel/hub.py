from __future__ import annotations

import threading
from typing import Any, Dict, Set

from starlette.requests import HTTPConnection
from starlette.websockets import WebSocket

from voicechat.core.observability import emit

EVENT_STATE_CHANGED = "state-changed"
EVENT_VOICE_PENDING = "voice-pending"


class ChannelHub:
    """
    Every connected socket, with no rooms or per-user filtering.

    Notifications carry no entity payload: subscribers treat them as a
    signal to re-fetch over HTTP.
    """

    def __init__(self) -> None:
        self._sockets: Set[WebSocket] = set()
        self._lock = threading.Lock()

    def subscribe(self, ws: WebSocket) -> None:
        with self._lock:
            self._sockets.add(ws)

    def unsubscribe(self, ws: WebSocket) -> None:
        with self._lock:
            self._sockets.discard(ws)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sockets)

    async def broadcast(self, event_type: str) -> int:
        """Fire-and-forget; sockets that fail to take the frame are dropped."""
        with self._lock:
            targets = list(self._sockets)
        frame: Dict[str, Any] = {"type": event_type}
        delivered = 0
        for ws in targets:
            try:
                await ws.send_json(frame)
                delivered += 1
            except Exception as e:
                self.unsubscribe(ws)
                emit("info", "channel.send.dropped", str(e) or type(e).__name__, None, __name__, event_type=event_type)
        return delivered


def get_hub(conn: HTTPConnection) -> ChannelHub:
    return conn.app.state.hub
