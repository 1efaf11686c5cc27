"""
Upgrade records written by the older camelCase JSON format.

Older files used integer millisecond ids, `charId` / `userId` / `from`
keys, and a `time` epoch-ms field instead of `created_at`.
"""
from __future__ import annotations

import datetime
from typing import Any, Dict, Mapping


def _ms_to_iso(ms: Any) -> Any:
    if isinstance(ms, bool) or not isinstance(ms, (int, float)):
        return ms
    ts = datetime.datetime.fromtimestamp(ms / 1000.0, tz=datetime.timezone.utc)
    return ts.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def upgrade_record(data: Any, renames: Mapping[str, str]) -> Any:
    if not isinstance(data, dict):
        return data
    out: Dict[str, Any] = dict(data)

    for old, new in renames.items():
        if old in out and new not in out:
            out[new] = out.pop(old)

    if "time" in out and "created_at" not in out:
        out["created_at"] = _ms_to_iso(out.pop("time"))
    if "created_at" not in out and isinstance(out.get("id"), int):
        out["created_at"] = _ms_to_iso(out["id"])

    for key, value in list(out.items()):
        if (key == "id" or key.endswith("_id")) and isinstance(value, int) and not isinstance(value, bool):
            out[key] = str(value)
    return out
