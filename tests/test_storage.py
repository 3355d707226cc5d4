"""Tests for canonical JSON, filesystem primitives, the ledger and the revision store."""

from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from consolecad.cad.mapping import map_to_variables
from consolecad.cad.runs import CadRunRecord, CadRunStatus
from consolecad.models.run_meta import RunMetadata
from consolecad.spec.summary import pspec_summary_markdown
from consolecad.storage.fs import (
    StorageError,
    assert_valid_project_id,
    atomic_write_text,
    read_json,
    revision_dir_name,
    safe_join,
    sanitize_file_name,
)
from consolecad.storage.hasher import Hasher
from consolecad.storage.ledger import FileLedgerStore, InMemoryLedgerStore, LedgerConflictError
from consolecad.storage.revisions import FileRevisionStore, RevisionExistsError
from consolecad.storage.stable_json import stable_dumps

from conftest import NOW, PROJECT_ID


# ── Canonical JSON and hashing ───────────────────────────────────────────────

class TestStableJson:

    def test_sorted_keys_and_newline(self):
        text = stable_dumps({"b": 1, "a": {"d": 2, "c": 3}})
        assert text.endswith("\n")
        assert text.index('"a"') < text.index('"b"')
        assert text.index('"c"') < text.index('"d"')

    def test_hash_independent_of_key_order(self):
        assert Hasher.hash_record({"a": 1, "b": 2}) == Hasher.hash_record({"b": 2, "a": 1})

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            stable_dumps({"x": float("nan")})

    def test_model_omits_none(self, make_brief):
        data = json.loads(stable_dumps(make_brief()))
        assert "notes" not in data["material"]

    def test_hash_file_matches_record_hash(self, tmp_path, make_brief):
        dib = make_brief()
        path = atomic_write_text(tmp_path / "dib.json", stable_dumps(dib))
        assert Hasher.hash_file(path) == Hasher.hash_record(dib)


# ── Filesystem primitives ────────────────────────────────────────────────────

class TestFs:

    def test_project_id_validation(self):
        assert_valid_project_id("prj_2b7e4a")
        for bad in ("ab", "../etc", "_leading", "x" * 80, ""):
            with pytest.raises(StorageError):
                assert_valid_project_id(bad)

    def test_safe_join_blocks_traversal(self, tmp_path):
        assert safe_join(tmp_path, "a", "b.json") == (tmp_path / "a" / "b.json").resolve()
        with pytest.raises(StorageError):
            safe_join(tmp_path, "..", "outside.json")

    def test_revision_dir_name(self):
        assert revision_dir_name(1) == "rev-0001"
        assert revision_dir_name(42) == "rev-0042"
        for bad in (0, -1, True):
            with pytest.raises(StorageError):
                revision_dir_name(bad)

    def test_sanitize_file_name(self):
        assert sanitize_file_name(" ../a/b\x00.glb ") == "b.glb"

    def test_atomic_write_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "sub" / "x.json"
        atomic_write_text(target, "{}\n")
        atomic_write_text(target, '{"a": 1}\n')
        assert read_json(target) == {"a": 1}
        assert [p.name for p in target.parent.iterdir()] == ["x.json"]

    def test_read_json_errors(self, tmp_path):
        with pytest.raises(StorageError, match="Missing"):
            read_json(tmp_path / "nope.json")
        bad = tmp_path / "bad.json"
        bad.write_text("{")
        with pytest.raises(StorageError, match="Malformed"):
            read_json(bad)


# ── Ledger ───────────────────────────────────────────────────────────────────

def _meta() -> RunMetadata:
    return RunMetadata.new(PROJECT_ID, NOW, "  Walnut console  ")


@pytest.fixture(params=["memory", "file"])
def ledger(request, tmp_path):
    if request.param == "memory":
        return InMemoryLedgerStore()
    return FileLedgerStore(tmp_path)


class TestLedger:

    def test_create_and_get(self, ledger):
        assert ledger.get(PROJECT_ID) is None
        stored = ledger.compare_and_swap(PROJECT_ID, None, _meta())
        assert stored.sequence == 0
        assert ledger.get(PROJECT_ID) == stored
        assert stored.project_name == "Walnut console"

    def test_sequence_increments(self, ledger):
        first = ledger.compare_and_swap(PROJECT_ID, None, _meta())
        second = ledger.compare_and_swap(PROJECT_ID, first.sequence, first)
        assert second.sequence == 1

    def test_stale_write_rejected(self, ledger):
        first = ledger.compare_and_swap(PROJECT_ID, None, _meta())
        ledger.compare_and_swap(PROJECT_ID, first.sequence, first)
        with pytest.raises(LedgerConflictError) as exc:
            ledger.compare_and_swap(PROJECT_ID, first.sequence, first)
        assert exc.value.expected == 0
        assert exc.value.actual == 1

    def test_double_create_rejected(self, ledger):
        ledger.compare_and_swap(PROJECT_ID, None, _meta())
        with pytest.raises(LedgerConflictError):
            ledger.compare_and_swap(PROJECT_ID, None, _meta())

    def test_delete(self, ledger):
        ledger.compare_and_swap(PROJECT_ID, None, _meta())
        ledger.delete(PROJECT_ID)
        assert ledger.get(PROJECT_ID) is None

    def test_concurrent_writers_single_winner(self, ledger):
        base = ledger.compare_and_swap(PROJECT_ID, None, _meta())
        barrier = threading.Barrier(8)
        wins: list[int] = []
        conflicts: list[int] = []

        def writer(i: int) -> None:
            barrier.wait()
            try:
                ledger.compare_and_swap(PROJECT_ID, base.sequence, base)
                wins.append(i)
            except LedgerConflictError:
                conflicts.append(i)

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(wins) == 1
        assert len(conflicts) == 7
        assert ledger.get(PROJECT_ID).sequence == 1


class TestFileLedgerFormat:

    def test_explicit_nulls_kept(self, tmp_path):
        store = FileLedgerStore(tmp_path)
        store.compare_and_swap(PROJECT_ID, None, _meta())
        data = json.loads(store.path_for(PROJECT_ID).read_text())
        assert data["pspec"]["approval"] == {"decided_at": None, "revision": None, "state": "none"}
        assert data["crg"] is None

    def test_invalid_project_id(self, tmp_path):
        with pytest.raises(StorageError):
            FileLedgerStore(tmp_path).get("../x")


# ── Revision store ───────────────────────────────────────────────────────────

class TestRevisionStore:

    def test_layout_and_listing(self, tmp_path):
        store = FileRevisionStore(tmp_path)
        store.ensure_layout("prj_bbbbbb")
        store.ensure_layout("prj_aaaaaa")
        (tmp_path / ".hidden").mkdir()
        for sub in ("crg", "dib", "pspec", "meta"):
            assert (tmp_path / "prj_aaaaaa" / sub).is_dir()
        assert store.list_project_ids() == ["prj_aaaaaa", "prj_bbbbbb"]
        store.delete_project("prj_aaaaaa")
        assert store.list_project_ids() == ["prj_bbbbbb"]

    def test_draft_round_trip(self, tmp_path, make_draft):
        store = FileRevisionStore(tmp_path)
        assert store.read_draft(PROJECT_ID) is None
        store.write_draft(PROJECT_ID, make_draft())
        assert store.read_draft(PROJECT_ID) == make_draft()

    def test_dib_revision_immutable(self, tmp_path, make_brief):
        store = FileRevisionStore(tmp_path)
        dib = make_brief()
        path = store.write_dib_revision(PROJECT_ID, dib)
        assert path == (tmp_path / PROJECT_ID / "dib" / "rev-0001" / "dib.json").resolve()
        with pytest.raises(RevisionExistsError):
            store.write_dib_revision(PROJECT_ID, dib)
        assert store.read_dib_revision(PROJECT_ID, 1) == dib
        assert store.read_dib_revision(PROJECT_ID, 2) is None

    def test_pspec_revision_immutable(self, tmp_path, make_pspec):
        store = FileRevisionStore(tmp_path)
        pspec = make_pspec()
        summary = pspec_summary_markdown(pspec)
        rev_dir = store.write_pspec_revision(PROJECT_ID, pspec, summary)
        assert (rev_dir / "pspec.json").is_file()
        assert (rev_dir / "pspec.summary.md").read_text() == summary
        with pytest.raises(RevisionExistsError):
            store.write_pspec_revision(PROJECT_ID, pspec, summary)
        assert store.read_pspec_revision(PROJECT_ID, 1) == pspec
        assert store.read_pspec_summary(PROJECT_ID, 1) == summary
        assert store.read_latest_pspec(PROJECT_ID) is None

        store.write_latest_pspec(PROJECT_ID, pspec, summary)
        assert store.read_latest_pspec(PROJECT_ID) == pspec
        assert store.read_pspec_summary(PROJECT_ID) == summary

    def test_mapping_artifacts(self, tmp_path, make_pspec):
        store = FileRevisionStore(tmp_path)
        mapping = map_to_variables(make_pspec())
        cad_dir = store.write_mapping(PROJECT_ID, 1, mapping)
        assert cad_dir == (tmp_path / PROJECT_ID / "revisions" / "rev-0001" / "cad").resolve()
        assert store.read_variables(PROJECT_ID, 1) == mapping.variables
        assert store.read_provenance(PROJECT_ID, 1) == mapping.provenance
        with pytest.raises(RevisionExistsError):
            store.write_mapping(PROJECT_ID, 1, mapping)

    def test_failed_mapping_not_persisted(self, tmp_path, make_pspec):
        data = make_pspec().model_dump(mode="json")
        data["material"]["type"] = "bamboo"
        with pytest.raises(StorageError):
            FileRevisionStore(tmp_path).write_mapping(PROJECT_ID, 1, map_to_variables(data))

    def test_discard_pspec_revision(self, tmp_path, make_pspec):
        store = FileRevisionStore(tmp_path)
        pspec = make_pspec()
        store.write_pspec_revision(PROJECT_ID, pspec, "x\n")
        store.write_mapping(PROJECT_ID, 1, map_to_variables(pspec))
        store.discard_pspec_revision(PROJECT_ID, 1)
        assert not store.pspec_revision_dir(PROJECT_ID, 1).exists()
        assert not (tmp_path / PROJECT_ID / "revisions" / "rev-0001").exists()

    def test_cad_run_archive(self, tmp_path):
        store = FileRevisionStore(tmp_path)
        assert store.archive_cad_run(PROJECT_ID, 1, NOW) is None
        run = CadRunRecord(status=CadRunStatus.SUCCESS, timestamp=NOW)
        store.write_cad_run(PROJECT_ID, 1, run)
        assert store.read_cad_run(PROJECT_ID, 1) == run

        archived = store.archive_cad_run(PROJECT_ID, 1, "2026-01-02T03:04:05.678Z")
        assert archived.name == "onshape.run.2026-01-02T03-04-05-678Z.json"
        assert CadRunRecord.model_validate(read_json(archived)) == run
        raw = json.loads((store.cad_dir(PROJECT_ID, 1) / "onshape.run.json").read_text())
        assert raw["url"] is None

    def test_corrupt_record_raises(self, tmp_path):
        store = FileRevisionStore(tmp_path)
        path: Path = store.cad_dir(PROJECT_ID, 1) / "onshape.variables.json"
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2]")
        with pytest.raises(StorageError):
            store.read_variables(PROJECT_ID, 1)
