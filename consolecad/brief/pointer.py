"""JSON-pointer access into untyped draft mappings."""

from __future__ import annotations

from typing import Any

MISSING: Any = object()


def _split(pointer: str) -> list[str] | None:
    if not pointer.startswith("/"):
        return None
    return [p.replace("~1", "/").replace("~0", "~") for p in pointer.split("/")[1:]]


def get_by_pointer(obj: Any, pointer: str, default: Any = MISSING) -> Any:
    """Return the value at *pointer*, or *default* if any segment is absent."""
    parts = _split(pointer)
    if parts is None:
        return default
    cur = obj
    for part in parts:
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def set_by_pointer(obj: dict[str, Any], pointer: str, value: Any) -> None:
    """Set *value* at *pointer*, creating intermediate dicts as needed."""
    parts = _split(pointer)
    if not parts:
        raise ValueError(f"Invalid JSON pointer: {pointer!r}")
    cur = obj
    for part in parts[:-1]:
        nxt = cur.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[part] = nxt
        cur = nxt
    cur[parts[-1]] = value
