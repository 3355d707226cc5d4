"""Run-metadata ledger stores with optimistic concurrency.

Every ledger carries a ``sequence`` that increases by one on each successful
write.  Writers read a ledger, derive a new one, and hand both the sequence
they read and the new document to :meth:`LedgerStore.compare_and_swap`; a
concurrent writer in between makes the swap fail with
:class:`LedgerConflictError` and nothing is written.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from consolecad.config import META_DIR, RUN_META_FILENAME
from consolecad.models.run_meta import RunMetadata
from consolecad.storage.fs import assert_valid_project_id, atomic_write_text, read_json, safe_join
from consolecad.storage.stable_json import stable_dumps

logger = logging.getLogger(__name__)


class LedgerConflictError(Exception):
    """The ledger changed since it was read."""

    def __init__(self, project_id: str, expected: int | None, actual: int | None) -> None:
        super().__init__(
            f"Ledger for {project_id} changed concurrently "
            f"(expected sequence {expected}, found {actual})."
        )
        self.project_id = project_id
        self.expected = expected
        self.actual = actual


class LedgerStore(ABC):
    """Abstract per-project ledger storage."""

    @abstractmethod
    def get(self, project_id: str) -> RunMetadata | None:
        """Return the current ledger, or ``None`` if the project has none."""

    @abstractmethod
    def compare_and_swap(
        self,
        project_id: str,
        expected_sequence: int | None,
        new_meta: RunMetadata,
    ) -> RunMetadata:
        """Replace the ledger if its sequence still equals *expected_sequence*.

        ``None`` means "no ledger exists yet".  Returns the stored ledger with
        its sequence incremented.
        """

    @abstractmethod
    def delete(self, project_id: str) -> None:
        """Forget the ledger of *project_id*."""


def _next(meta: RunMetadata, expected_sequence: int | None) -> RunMetadata:
    sequence = 0 if expected_sequence is None else expected_sequence + 1
    return meta.model_copy(update={"sequence": sequence}, deep=True)


class InMemoryLedgerStore(LedgerStore):
    """Process-local ledger store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ledgers: dict[str, RunMetadata] = {}

    def get(self, project_id: str) -> RunMetadata | None:
        with self._lock:
            meta = self._ledgers.get(project_id)
            return meta.model_copy(deep=True) if meta is not None else None

    def compare_and_swap(
        self,
        project_id: str,
        expected_sequence: int | None,
        new_meta: RunMetadata,
    ) -> RunMetadata:
        with self._lock:
            current = self._ledgers.get(project_id)
            actual = current.sequence if current is not None else None
            if actual != expected_sequence:
                raise LedgerConflictError(project_id, expected_sequence, actual)
            stored = _next(new_meta, expected_sequence)
            self._ledgers[project_id] = stored
            return stored.model_copy(deep=True)

    def delete(self, project_id: str) -> None:
        with self._lock:
            self._ledgers.pop(project_id, None)


class FileLedgerStore(LedgerStore):
    """Ledger stored as ``<root>/<project>/meta/run.json``.

    Swaps are serialized per project inside this process; the file itself is
    replaced atomically.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, project_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(project_id, threading.Lock())

    def path_for(self, project_id: str) -> Path:
        assert_valid_project_id(project_id)
        return safe_join(self.root, project_id, META_DIR, RUN_META_FILENAME)

    def _read(self, project_id: str) -> RunMetadata | None:
        path = self.path_for(project_id)
        if not path.is_file():
            return None
        return RunMetadata.model_validate(read_json(path))

    def get(self, project_id: str) -> RunMetadata | None:
        return self._read(project_id)

    def compare_and_swap(
        self,
        project_id: str,
        expected_sequence: int | None,
        new_meta: RunMetadata,
    ) -> RunMetadata:
        with self._lock_for(project_id):
            current = self._read(project_id)
            actual = current.sequence if current is not None else None
            if actual != expected_sequence:
                raise LedgerConflictError(project_id, expected_sequence, actual)
            stored = _next(new_meta, expected_sequence)
            # Explicit nulls (e.g. an unset approval revision) are part of the format
            atomic_write_text(self.path_for(project_id), stable_dumps(stored.model_dump(mode="json")))
            logger.debug("Ledger for %s now at sequence %d", project_id, stored.sequence)
            return stored

    def delete(self, project_id: str) -> None:
        self.path_for(project_id).unlink(missing_ok=True)
