"""Content hashing utilities using stdlib hashlib (SHA-256)."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

from consolecad.storage.stable_json import stable_dumps


class Hasher:
    """SHA-256 hashing for bytes, strings, files, and canonical records."""

    @staticmethod
    def hash_bytes(data: bytes) -> str:
        """Return the SHA-256 hex digest of *data*."""
        return hashlib.sha256(data).hexdigest()

    @staticmethod
    def hash_string(text: str) -> str:
        """Return the SHA-256 hex digest of *text* encoded as UTF-8."""
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    @staticmethod
    def hash_file(path: str | Path) -> str:
        """Return the SHA-256 hex digest of the file at *path*."""
        h = hashlib.sha256()
        p = Path(path)
        with p.open("rb") as f:
            while True:
                chunk = f.read(65536)
                if not chunk:
                    break
                h.update(chunk)
        return h.hexdigest()

    @staticmethod
    def hash_record(record: Any) -> str:
        """Return the digest of the canonical (sorted-key) serialization of *record*."""
        return Hasher.hash_string(stable_dumps(record))
