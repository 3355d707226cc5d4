"""RunMetadata: the per-project ledger.

This is the only mutable aggregate: it tracks latest revision numbers, the
hash lineage of every DIB and PSPEC revision, and the approval pointer.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from consolecad.config import DIB_VERSION, MAX_PROJECT_NAME_LENGTH, META_VERSION, PSPEC_VERSION
from consolecad.models.geometry import GeometryMetadata


class ApprovalState(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RevisionApproval(BaseModel):
    """Approval record owned by a single PSPEC revision."""

    state: ApprovalState = ApprovalState.PENDING
    decided_at: str | None = None


class ApprovalPointer(BaseModel):
    """Project-level approval: which revision, in which state."""

    state: ApprovalState = ApprovalState.NONE
    revision: int | None = None
    decided_at: str | None = None


class DibRevisionEntry(BaseModel):
    revision: int
    sha256: str
    confirmed_at: str


class PspecRevisionEntry(BaseModel):
    revision: int
    sha256: str
    summary_md_sha256: str
    created_at: str
    dib_revision: int
    dib_sha256: str
    crg_sha256: str
    approval: RevisionApproval = Field(default_factory=RevisionApproval)


class DibLedger(BaseModel):
    latest_revision: int = 0
    revisions: list[DibRevisionEntry] = Field(default_factory=list)


class PspecLedger(BaseModel):
    latest_revision: int = 0
    revisions: list[PspecRevisionEntry] = Field(default_factory=list)
    approval: ApprovalPointer = Field(default_factory=ApprovalPointer)


class SchemaVersions(BaseModel):
    dib: str = DIB_VERSION
    pspec: str = PSPEC_VERSION


def normalize_project_name(name: str | None) -> str | None:
    """Trim a project name; blank becomes ``None``, long names are capped."""
    if name is None:
        return None
    trimmed = name.strip()
    if not trimmed:
        return None
    return trimmed[:MAX_PROJECT_NAME_LENGTH]


class RunMetadata(BaseModel):
    """Ledger document stored at ``meta/run.json``."""

    meta_version: str = META_VERSION
    project_id: str
    project_name: str | None = None
    created_at: str
    updated_at: str
    sequence: int = 0
    """Incremented on every successful ledger write (optimistic concurrency)."""

    schema_versions: SchemaVersions = Field(default_factory=SchemaVersions)
    crg: GeometryMetadata | None = None
    dib: DibLedger = Field(default_factory=DibLedger)
    pspec: PspecLedger = Field(default_factory=PspecLedger)

    @classmethod
    def new(cls, project_id: str, now: str, project_name: str | None = None) -> RunMetadata:
        return cls(
            project_id=project_id,
            project_name=normalize_project_name(project_name),
            created_at=now,
            updated_at=now,
        )

    def pspec_entry(self, revision: int) -> PspecRevisionEntry | None:
        for entry in self.pspec.revisions:
            if entry.revision == revision:
                return entry
        return None
