"""Project-level operations: create, list, delete.

A project is a folder under the artifacts root (``crg/ dib/ pspec/ meta/``)
plus its ledger.
"""

from __future__ import annotations

import logging
import uuid

from consolecad.api.errors import ProjectNotFoundError
from consolecad.config import PROJECT_ID_PREFIX
from consolecad.models.run_meta import RunMetadata
from consolecad.storage.ledger import LedgerStore
from consolecad.storage.revisions import FileRevisionStore

logger = logging.getLogger(__name__)


def new_project_id() -> str:
    return f"{PROJECT_ID_PREFIX}{uuid.uuid4()}"


def create_project(
    store: FileRevisionStore,
    ledger: LedgerStore,
    *,
    now: str,
    name: str | None = None,
    project_id: str | None = None,
) -> RunMetadata:
    """Lay out a new project folder and initialise its ledger.

    Parameters
    ----------
    name:
        Optional human-readable name; trimmed, blank becomes ``None`` and
        long names are capped.
    project_id:
        Explicit id (must match the project-id pattern); a fresh
        ``prj_<uuid4>`` is allocated when omitted.
    """
    pid = project_id or new_project_id()
    store.ensure_layout(pid)
    meta = ledger.compare_and_swap(pid, None, RunMetadata.new(pid, now, name))
    logger.info("Created project %s", pid)
    return meta


def list_projects(store: FileRevisionStore, ledger: LedgerStore) -> list[RunMetadata]:
    """Ledgers of every project folder under the root, ordered by id."""
    result: list[RunMetadata] = []
    for pid in store.list_project_ids():
        meta = ledger.get(pid)
        if meta is not None:
            result.append(meta)
    return result


def delete_project(store: FileRevisionStore, ledger: LedgerStore, project_id: str) -> None:
    """Remove every artifact of *project_id*, including its ledger."""
    if ledger.get(project_id) is None and not store.project_exists(project_id):
        raise ProjectNotFoundError(project_id)
    ledger.delete(project_id)
    store.delete_project(project_id)
    logger.info("Deleted project %s", project_id)
