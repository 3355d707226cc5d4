"""Persistence: canonical JSON, hashing, revision files and the run ledger."""

from consolecad.storage.fs import StorageError, atomic_write_bytes, atomic_write_text, read_json, safe_join
from consolecad.storage.hasher import Hasher
from consolecad.storage.ledger import (
    FileLedgerStore,
    InMemoryLedgerStore,
    LedgerConflictError,
    LedgerStore,
)
from consolecad.storage.revisions import FileRevisionStore, RevisionExistsError
from consolecad.storage.stable_json import stable_dumps

__all__ = [
    "FileLedgerStore",
    "FileRevisionStore",
    "Hasher",
    "InMemoryLedgerStore",
    "LedgerConflictError",
    "LedgerStore",
    "RevisionExistsError",
    "StorageError",
    "atomic_write_bytes",
    "atomic_write_text",
    "read_json",
    "safe_join",
    "stable_dumps",
]
