"""Filesystem primitives: project-id checks, safe paths, atomic writes."""

from __future__ import annotations

import json
import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any

from consolecad.config import PROJECT_ID_PATTERN, REVISION_DIR_FORMAT

logger = logging.getLogger(__name__)

_PROJECT_ID_RE = re.compile(PROJECT_ID_PATTERN)


class StorageError(Exception):
    """Raised on unsafe paths, invalid ids, or unreadable stored artifacts."""


def is_valid_project_id(project_id: str) -> bool:
    return bool(_PROJECT_ID_RE.match(project_id or ""))


def assert_valid_project_id(project_id: str) -> None:
    """Raise :class:`StorageError` unless *project_id* is a well-formed id."""
    if not is_valid_project_id(project_id):
        raise StorageError(f"Invalid project_id: {project_id!r}")


def safe_join(root: str | Path, *parts: str) -> Path:
    """Join *parts* onto *root*, refusing any result that escapes *root*."""
    resolved_root = Path(root).resolve()
    resolved = resolved_root.joinpath(*parts).resolve()
    if resolved != resolved_root and resolved_root not in resolved.parents:
        raise StorageError(f"Unsafe path: {'/'.join(parts)}")
    return resolved


def revision_dir_name(revision: int) -> str:
    if isinstance(revision, bool) or not isinstance(revision, int) or revision < 1:
        raise StorageError(f"Invalid revision: {revision!r}")
    return REVISION_DIR_FORMAT.format(revision)


def sanitize_file_name(file_name: str) -> str:
    """Strip directories and NUL bytes from an uploaded file name."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    return base.replace("\x00", "").strip()


def atomic_write_bytes(path: Path, data: bytes) -> Path:
    """Write *data* to *path* via a temp file in the same folder plus rename.

    Readers either see the previous content or the new content, never a
    partial file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with open(fd, "wb") as fh:
            fh.write(data)
        Path(tmp).replace(path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return path


def atomic_write_text(path: Path, text: str) -> Path:
    return atomic_write_bytes(path, text.encode("utf-8"))


def read_json(path: Path) -> Any:
    """Read and parse a JSON artifact.

    Raises
    ------
    StorageError
        If the file is missing or is not valid JSON.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise StorageError(f"Missing artifact: {path}") from exc
    except json.JSONDecodeError as exc:
        raise StorageError(f"Malformed JSON in {path}: {exc}") from exc


def remove_tree(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
        logger.info("Removed %s", path)
