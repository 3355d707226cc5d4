"""Tests for the PSPEC approval state machine."""

from __future__ import annotations

import pytest

from consolecad import approval
from consolecad.approval import ApprovalError
from consolecad.models.run_meta import ApprovalState, PspecRevisionEntry, RunMetadata

T0 = "2026-01-01T00:00:00.000Z"
T1 = "2026-01-01T01:00:00.000Z"


def _entry(revision: int) -> PspecRevisionEntry:
    return PspecRevisionEntry(
        revision=revision,
        sha256="a" * 64,
        summary_md_sha256="b" * 64,
        created_at=T0,
        dib_revision=1,
        dib_sha256="c" * 64,
        crg_sha256="d" * 64,
    )


@pytest.fixture
def pending() -> RunMetadata:
    return approval.mark_generated(RunMetadata.new("prj_test01", T0), _entry(1))


class TestApprovalTransitions:

    def test_new_project_has_no_approval(self):
        meta = RunMetadata.new("prj_test01", T0)
        assert meta.pspec.approval.state == ApprovalState.NONE
        assert meta.pspec.approval.revision is None

    def test_generation_sets_pending(self, pending):
        assert pending.pspec.latest_revision == 1
        assert pending.pspec.approval.state == ApprovalState.PENDING
        assert pending.pspec.approval.revision == 1
        assert pending.pspec_entry(1).approval.state == ApprovalState.PENDING

    def test_approve_pending_revision(self, pending):
        meta = approval.approve(pending, 1, T1)
        assert meta.pspec.approval.state == ApprovalState.APPROVED
        assert meta.pspec.approval.revision == 1
        assert meta.pspec.approval.decided_at == T1
        assert meta.pspec_entry(1).approval.state == ApprovalState.APPROVED
        assert meta.pspec_entry(1).approval.decided_at == T1
        assert approval.is_approved(meta, 1)

    def test_reject_pending_revision(self, pending):
        meta = approval.reject(pending, 1, T1)
        assert meta.pspec.approval.state == ApprovalState.REJECTED
        assert meta.pspec_entry(1).approval.state == ApprovalState.REJECTED
        assert not approval.is_approved(meta, 1)

    def test_transitions_do_not_mutate_input(self, pending):
        approval.approve(pending, 1, T1)
        assert pending.pspec.approval.state == ApprovalState.PENDING
        assert pending.pspec_entry(1).approval.state == ApprovalState.PENDING

    def test_decisions_are_terminal(self, pending):
        approved = approval.approve(pending, 1, T1)
        with pytest.raises(ApprovalError):
            approval.approve(approved, 1, T1)
        with pytest.raises(ApprovalError):
            approval.reject(approved, 1, T1)

        rejected = approval.reject(pending, 1, T1)
        with pytest.raises(ApprovalError):
            approval.approve(rejected, 1, T1)

    def test_only_pending_revision_can_be_decided(self, pending):
        with pytest.raises(ApprovalError):
            approval.approve(pending, 2, T1)

    def test_nothing_to_approve_without_generation(self):
        with pytest.raises(ApprovalError):
            approval.approve(RunMetadata.new("prj_test01", T0), 1, T1)

    def test_new_generation_supersedes_pending(self, pending):
        meta = approval.mark_generated(pending, _entry(2))
        assert meta.pspec.approval.revision == 2
        assert meta.pspec.latest_revision == 2
        with pytest.raises(ApprovalError):
            approval.approve(meta, 1, T1)
        assert approval.is_approved(approval.approve(meta, 2, T1), 2)


class TestApprovalReset:

    def test_new_brief_resets_pointer_keeps_history(self, pending):
        approved = approval.approve(pending, 1, T1)
        meta = approval.reset_for_new_brief(approved)
        assert meta.pspec.approval.state == ApprovalState.NONE
        assert meta.pspec.approval.revision is None
        assert meta.pspec.approval.decided_at is None
        assert meta.pspec_entry(1).approval.state == ApprovalState.APPROVED
        assert approval.is_approved(meta, 1)

    def test_reset_blocks_decisions(self, pending):
        meta = approval.reset_for_new_brief(pending)
        with pytest.raises(ApprovalError):
            approval.approve(meta, 1, T1)

    def test_unknown_revision_not_approved(self, pending):
        assert not approval.is_approved(pending, 9)
