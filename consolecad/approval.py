"""Approval state machine for PSPEC revisions.

Usage::

    from consolecad import approval

    meta = approval.mark_generated(meta, entry)        # pointer -> pending
    meta = approval.approve(meta, revision=1, now=ts)  # pending -> approved

Project pointer transitions::

    none ──generate──▶ pending(r) ──approve(r)──▶ approved(r)
                          │       ──reject(r)───▶ rejected(r)
    any ──new DIB revision──▶ none

``approved`` and ``rejected`` are terminal for their revision; only a new
PSPEC revision re-enters ``pending``.  Every function returns an updated copy
of the ledger and leaves its argument untouched.
"""

from __future__ import annotations

import logging

from consolecad.models.run_meta import (
    ApprovalPointer,
    ApprovalState,
    PspecRevisionEntry,
    RevisionApproval,
    RunMetadata,
)

logger = logging.getLogger(__name__)


class ApprovalError(Exception):
    """Raised on an illegal approval transition."""


def reset_for_new_brief(meta: RunMetadata) -> RunMetadata:
    """Clear the project pointer after a new DIB revision is confirmed.

    Per-revision approval records are history and are kept as they are.
    """
    updated = meta.model_copy(deep=True)
    updated.pspec.approval = ApprovalPointer()
    return updated


def mark_generated(meta: RunMetadata, entry: PspecRevisionEntry) -> RunMetadata:
    """Record a freshly generated PSPEC revision and point approval at it."""
    updated = meta.model_copy(deep=True)
    pending = entry.model_copy(update={"approval": RevisionApproval()})
    updated.pspec.revisions.append(pending)
    updated.pspec.latest_revision = max(updated.pspec.latest_revision, entry.revision)
    updated.pspec.approval = ApprovalPointer(state=ApprovalState.PENDING, revision=entry.revision)
    return updated


def _decide(meta: RunMetadata, revision: int, state: ApprovalState, now: str) -> RunMetadata:
    pointer = meta.pspec.approval
    if pointer.state != ApprovalState.PENDING:
        raise ApprovalError(
            f"Cannot mark revision {revision} {state.value}: approval is {pointer.state.value}."
        )
    if pointer.revision != revision:
        raise ApprovalError(
            f"Cannot mark revision {revision} {state.value}: "
            f"pending revision is {pointer.revision}."
        )
    if meta.pspec_entry(revision) is None:
        raise ApprovalError(f"PSPEC revision {revision} not found.")

    updated = meta.model_copy(deep=True)
    entry = updated.pspec_entry(revision)
    assert entry is not None
    entry.approval = RevisionApproval(state=state, decided_at=now)
    updated.pspec.approval = ApprovalPointer(state=state, revision=revision, decided_at=now)
    logger.debug("PSPEC revision %d of %s -> %s", revision, meta.project_id, state.value)
    return updated


def approve(meta: RunMetadata, revision: int, now: str) -> RunMetadata:
    """Approve *revision*.  Only the pending revision can be approved."""
    return _decide(meta, revision, ApprovalState.APPROVED, now)


def reject(meta: RunMetadata, revision: int, now: str) -> RunMetadata:
    """Reject *revision*.  Only the pending revision can be rejected."""
    return _decide(meta, revision, ApprovalState.REJECTED, now)


def is_approved(meta: RunMetadata, revision: int) -> bool:
    """True when the revision's own approval record is ``approved``."""
    entry = meta.pspec_entry(revision)
    return entry is not None and entry.approval.state == ApprovalState.APPROVED
