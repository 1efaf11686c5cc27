from __future__ import annotations

import os
import threading
import time
from typing import List

_CROCKFORD32 = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_ULID_BITS = 128

_lock = threading.Lock()
_last = 0


def _encode_crockford(value: int, length: int) -> str:
    chars: List[str] = []
    for _ in range(length):
        chars.append(_CROCKFORD32[value & 31])
        value >>= 5
    return "".join(reversed(chars))


def new_ulid() -> str:
    """
    48-bit time (ms) + 80-bit randomness, strictly increasing per process.

    Two calls in the same millisecond may draw a smaller random part; in that
    case the previous value + 1 is issued instead, so ids sort in creation
    order and never collide.
    """
    global _last
    ms = int(time.time() * 1000) & ((1 << 48) - 1)
    rnd = int.from_bytes(os.urandom(10), "big")
    v = (ms << 80) | rnd
    with _lock:
        if v <= _last:
            v = _last + 1
        v &= (1 << _ULID_BITS) - 1
        _last = v
    return _encode_crockford(v, 26)
