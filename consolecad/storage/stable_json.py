"""Canonical JSON serialization for persisted records.

Keys are sorted at every level so that the same record always produces the
same bytes, which is what the content hashes in the ledger are taken over.
"""

from __future__ import annotations

import json
from typing import Any


def _to_plain(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json", exclude_none=True)
    return value


def stable_dumps(value: Any) -> str:
    """Serialize *value* with sorted keys, two-space indent and trailing newline.

    Pydantic models are dumped in JSON mode with ``None`` fields omitted;
    plain dicts keep explicit ``None`` values.
    """
    return json.dumps(
        _to_plain(value),
        sort_keys=True,
        indent=2,
        ensure_ascii=False,
        allow_nan=False,
    ) + "\n"
