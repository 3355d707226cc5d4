"""Filesystem revision store for project artifacts.

Layout under the artifacts root::

    <project>/crg/<original file>
    <project>/dib/draft.json
    <project>/dib/rev-0001/dib.json          immutable
    <project>/dib/dib.json                   latest copy
    <project>/pspec/rev-0001/pspec.json      immutable
    <project>/pspec/rev-0001/pspec.summary.md
    <project>/pspec/pspec.json               latest copy (+ summary)
    <project>/revisions/rev-0001/cad/onshape.variables.json
    <project>/revisions/rev-0001/cad/onshape.provenance.json
    <project>/revisions/rev-0001/cad/onshape.run.json
    <project>/meta/run.json                  ledger (see ledger.py)

Every write is atomic.  Files inside a ``rev-NNNN`` folder are written once;
a second write raises :class:`RevisionExistsError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from consolecad.cad.mapping import MappingResult, VariableProvenance
from consolecad.cad.runs import CadRunRecord
from consolecad.config import (
    CAD_DIR,
    CAD_RUN_FILENAME,
    CRG_DIR,
    DIB_DIR,
    DIB_FILENAME,
    DRAFT_FILENAME,
    META_DIR,
    PROVENANCE_FILENAME,
    PSPEC_DIR,
    PSPEC_FILENAME,
    PSPEC_SUMMARY_FILENAME,
    REVISIONS_DIR,
    VARIABLES_FILENAME,
)
from consolecad.models.brief import DesignIntentBrief
from consolecad.models.geometry import GeometryMetadata
from consolecad.models.pspec import ParametricSpecification
from consolecad.storage.fs import (
    StorageError,
    assert_valid_project_id,
    atomic_write_bytes,
    atomic_write_text,
    is_valid_project_id,
    read_json,
    remove_tree,
    revision_dir_name,
    safe_join,
)
from consolecad.storage.hasher import Hasher
from consolecad.storage.stable_json import stable_dumps

logger = logging.getLogger(__name__)


class RevisionExistsError(StorageError):
    """Raised when an immutable revision file already exists."""


class FileRevisionStore:
    """Artifact storage rooted at *root* (one folder per project)."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    # -- Paths ------------------------------------------------------------

    def project_dir(self, project_id: str) -> Path:
        assert_valid_project_id(project_id)
        return safe_join(self.root, project_id)

    def _path(self, project_id: str, *parts: str) -> Path:
        return safe_join(self.project_dir(project_id), *parts)

    def dib_revision_path(self, project_id: str, revision: int) -> Path:
        return self._path(project_id, DIB_DIR, revision_dir_name(revision), DIB_FILENAME)

    def pspec_revision_dir(self, project_id: str, revision: int) -> Path:
        return self._path(project_id, PSPEC_DIR, revision_dir_name(revision))

    def cad_dir(self, project_id: str, revision: int) -> Path:
        return self._path(project_id, REVISIONS_DIR, revision_dir_name(revision), CAD_DIR)

    # -- Projects ---------------------------------------------------------

    def ensure_layout(self, project_id: str) -> Path:
        root = self.project_dir(project_id)
        for sub in (CRG_DIR, DIB_DIR, PSPEC_DIR, META_DIR):
            (root / sub).mkdir(parents=True, exist_ok=True)
        return root

    def project_exists(self, project_id: str) -> bool:
        return is_valid_project_id(project_id) and self.project_dir(project_id).is_dir()

    def list_project_ids(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if p.is_dir() and is_valid_project_id(p.name)
        )

    def delete_project(self, project_id: str) -> None:
        remove_tree(self.project_dir(project_id))

    # -- Helpers ----------------------------------------------------------

    @staticmethod
    def _write_once(path: Path, text: str) -> Path:
        if path.exists():
            raise RevisionExistsError(f"Refusing to overwrite {path}")
        return atomic_write_text(path, text)

    @staticmethod
    def _read_optional(path: Path) -> Any:
        return read_json(path) if path.is_file() else None

    # -- CRG --------------------------------------------------------------

    def crg_path(self, project_id: str, file_name: str) -> Path:
        return self._path(project_id, CRG_DIR, file_name)

    def read_crg(self, project_id: str, file_name: str) -> bytes | None:
        path = self.crg_path(project_id, file_name)
        return path.read_bytes() if path.is_file() else None

    def write_crg(self, project_id: str, meta: GeometryMetadata, data: bytes) -> Path:
        path = atomic_write_bytes(self.crg_path(project_id, meta.original_filename), data)
        logger.info("Stored CRG %s for %s", meta.original_filename, project_id)
        return path

    def discard_crg(self, project_id: str, meta: GeometryMetadata, previous: bytes | None) -> None:
        """Undo an upload that never reached the ledger.

        The payload is only touched while it still holds the bytes described
        by *meta*; *previous* (the file's earlier content) is put back, or the
        file is removed when there was none.
        """
        path = self.crg_path(project_id, meta.original_filename)
        if not path.is_file() or Hasher.hash_file(path) != meta.sha256:
            return
        if previous is None:
            path.unlink()
        else:
            atomic_write_bytes(path, previous)

    # -- DIB --------------------------------------------------------------

    def read_draft(self, project_id: str) -> dict[str, Any] | None:
        return self._read_optional(self._path(project_id, DIB_DIR, DRAFT_FILENAME))

    def write_draft(self, project_id: str, draft: dict[str, Any]) -> Path:
        return atomic_write_text(self._path(project_id, DIB_DIR, DRAFT_FILENAME), stable_dumps(draft))

    def write_dib_revision(self, project_id: str, dib: DesignIntentBrief) -> Path:
        return self._write_once(self.dib_revision_path(project_id, dib.revision), stable_dumps(dib))

    def write_latest_dib(self, project_id: str, dib: DesignIntentBrief) -> Path:
        return atomic_write_text(self._path(project_id, DIB_DIR, DIB_FILENAME), stable_dumps(dib))

    def discard_dib_revision(self, project_id: str, revision: int) -> None:
        """Remove a DIB revision that never reached the ledger."""
        remove_tree(self.dib_revision_path(project_id, revision).parent)

    def read_dib_revision(self, project_id: str, revision: int) -> DesignIntentBrief | None:
        data = self._read_optional(self.dib_revision_path(project_id, revision))
        return DesignIntentBrief.model_validate(data) if data is not None else None

    # -- PSPEC ------------------------------------------------------------

    def write_pspec_revision(
        self,
        project_id: str,
        pspec: ParametricSpecification,
        summary_md: str,
    ) -> Path:
        rev_dir = self.pspec_revision_dir(project_id, pspec.revision)
        if rev_dir.exists():
            raise RevisionExistsError(f"Refusing to overwrite {rev_dir}")
        self._write_once(rev_dir / PSPEC_FILENAME, stable_dumps(pspec))
        self._write_once(rev_dir / PSPEC_SUMMARY_FILENAME, summary_md)
        return rev_dir

    def write_latest_pspec(
        self,
        project_id: str,
        pspec: ParametricSpecification,
        summary_md: str,
    ) -> None:
        atomic_write_text(self._path(project_id, PSPEC_DIR, PSPEC_FILENAME), stable_dumps(pspec))
        atomic_write_text(self._path(project_id, PSPEC_DIR, PSPEC_SUMMARY_FILENAME), summary_md)

    def read_pspec_revision(self, project_id: str, revision: int) -> ParametricSpecification | None:
        data = self._read_optional(self.pspec_revision_dir(project_id, revision) / PSPEC_FILENAME)
        return ParametricSpecification.model_validate(data) if data is not None else None

    def read_latest_pspec(self, project_id: str) -> ParametricSpecification | None:
        data = self._read_optional(self._path(project_id, PSPEC_DIR, PSPEC_FILENAME))
        return ParametricSpecification.model_validate(data) if data is not None else None

    def read_pspec_summary(self, project_id: str, revision: int | None = None) -> str | None:
        if revision is None:
            path = self._path(project_id, PSPEC_DIR, PSPEC_SUMMARY_FILENAME)
        else:
            path = self.pspec_revision_dir(project_id, revision) / PSPEC_SUMMARY_FILENAME
        return path.read_text(encoding="utf-8") if path.is_file() else None

    def discard_pspec_revision(self, project_id: str, revision: int) -> None:
        """Remove the artifacts of a revision that never reached the ledger."""
        remove_tree(self.pspec_revision_dir(project_id, revision))
        remove_tree(self.cad_dir(project_id, revision).parent)

    # -- CAD mapping and runs ---------------------------------------------

    def write_mapping(self, project_id: str, revision: int, mapping: MappingResult) -> Path:
        if not mapping.ok:
            raise StorageError("Refusing to persist a failed variable mapping.")
        cad_dir = self.cad_dir(project_id, revision)
        self._write_once(cad_dir / VARIABLES_FILENAME, stable_dumps(mapping.variables))
        self._write_once(
            cad_dir / PROVENANCE_FILENAME,
            stable_dumps([p.model_dump(mode="json", exclude_none=True) for p in mapping.provenance]),
        )
        return cad_dir

    def read_variables(self, project_id: str, revision: int) -> dict[str, int]:
        data = read_json(self.cad_dir(project_id, revision) / VARIABLES_FILENAME)
        if not isinstance(data, dict):
            raise StorageError(f"Invalid {VARIABLES_FILENAME} for revision {revision}.")
        return data

    def read_provenance(self, project_id: str, revision: int) -> list[VariableProvenance]:
        data = read_json(self.cad_dir(project_id, revision) / PROVENANCE_FILENAME)
        if not isinstance(data, list):
            raise StorageError(f"Invalid {PROVENANCE_FILENAME} for revision {revision}.")
        return [VariableProvenance.model_validate(p) for p in data]

    def read_cad_run(self, project_id: str, revision: int) -> CadRunRecord | None:
        data = self._read_optional(self.cad_dir(project_id, revision) / CAD_RUN_FILENAME)
        return CadRunRecord.model_validate(data) if data is not None else None

    def write_cad_run(self, project_id: str, revision: int, record: CadRunRecord) -> Path:
        path = self.cad_dir(project_id, revision) / CAD_RUN_FILENAME
        return atomic_write_text(path, stable_dumps(record.model_dump(mode="json")))

    def archive_cad_run(self, project_id: str, revision: int, now: str) -> Path | None:
        """Copy the current run record aside as ``onshape.run.<timestamp>.json``."""
        record = self.read_cad_run(project_id, revision)
        if record is None:
            return None
        stamp = now.replace(":", "-").replace(".", "-")
        path = self.cad_dir(project_id, revision) / f"onshape.run.{stamp}.json"
        atomic_write_text(path, stable_dumps(record.model_dump(mode="json")))
        logger.info("Archived CAD run for %s revision %d", project_id, revision)
        return path
