"""ConsoleCad: the single entry point for the record-console pipeline.

Usage::

    from consolecad import ConsoleCad

    cc = ConsoleCad("artifacts")
    meta = cc.create_project("Living room console")
    cc.upload_crg(meta.project_id, "concept.glb", data)
    cc.save_draft(meta.project_id, answers)
    cc.confirm_brief(meta.project_id)
    result = cc.generate_pspec(meta.project_id)
    cc.approve(meta.project_id, result.pspec.revision)
    cc.generate_cad(meta.project_id, result.pspec.revision, backend)

Pure stages (normalize, synthesize, validate, map) never touch storage; this
class reads the ledger, runs them, persists their artifacts and then swaps
the ledger.  A failed stage persists nothing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, Field

from consolecad import approval
from consolecad.api import projects as proj_ops
from consolecad.api.errors import PreconditionError, ProjectNotFoundError
from consolecad.brief.normalizer import FieldError, normalize_brief
from consolecad.brief.questions import QUESTION_SET_V0_1, Question, QuestionSet
from consolecad.cad.backend import CadBackend, CadBackendError, call_with_auth_retry
from consolecad.cad.mapping import MappingError, map_to_variables
from consolecad.cad.runs import (
    CadRunError,
    CadRunOutcome,
    CadRunRecord,
    CadRunStatus,
    CadRunStep,
    CreatedDocument,
    TemplateRef,
    VariablesApplied,
)
from consolecad.clock import utc_now_iso
from consolecad.config_manager import ConfigManager, configure_logging
from consolecad.intake.crg import ingest_crg
from consolecad.models.brief import DesignIntentBrief
from consolecad.models.geometry import GeometryMetadata
from consolecad.models.pspec import ParametricSpecification
from consolecad.models.run_meta import DibRevisionEntry, PspecRevisionEntry, RunMetadata
from consolecad.spec.summary import pspec_summary_markdown
from consolecad.spec.synthesizer import synthesize_pspec
from consolecad.storage.fs import StorageError
from consolecad.storage.hasher import Hasher
from consolecad.storage.ledger import FileLedgerStore, LedgerStore
from consolecad.storage.revisions import FileRevisionStore
from consolecad.validation.manufacturability import ManufacturabilityValidator
from consolecad.validation.schema import SchemaError, validate_schema

logger = logging.getLogger(__name__)


class ConfirmResult(BaseModel):
    ok: bool
    brief: DesignIntentBrief | None = None
    errors: list[FieldError] = Field(default_factory=list)


class GenerateResult(BaseModel):
    """Outcome of one PSPEC generation attempt.

    On failure every stage's findings are listed and nothing was persisted.
    """

    ok: bool
    pspec: ParametricSpecification | None = None
    summary_md: str | None = None
    schema_errors: list[SchemaError] = Field(default_factory=list)
    manufacturability_errors: list[str] = Field(default_factory=list)
    mapping_errors: list[MappingError] = Field(default_factory=list)


class ConsoleCad:
    """The public interface for the record-console pipeline.

    Parameters
    ----------
    artifacts_root:
        Directory holding one folder per project.
    ledger:
        Ledger store; defaults to ``meta/run.json`` files under the root.
    clock:
        Callable returning ISO-8601 UTC timestamps.
    template:
        Onshape template used by :meth:`generate_cad`.
    """

    def __init__(
        self,
        artifacts_root: str | Path,
        *,
        ledger: LedgerStore | None = None,
        clock: Callable[[], str] | None = None,
        template: TemplateRef | None = None,
        question_set: QuestionSet = QUESTION_SET_V0_1,
    ) -> None:
        self.artifacts_root = Path(artifacts_root)
        self.store = FileRevisionStore(self.artifacts_root)
        self.ledger = ledger or FileLedgerStore(self.artifacts_root)
        self.template = template or TemplateRef()
        self.question_set = question_set
        self.validator = ManufacturabilityValidator()
        self._clock = clock or utc_now_iso

    @classmethod
    def from_config(cls, project_path: str | Path = ".", **kwargs: Any) -> ConsoleCad:
        """Build an instance from layered configuration (see :class:`ConfigManager`)."""
        manager = ConfigManager()
        config = manager.load_config(project_path)
        configure_logging(config["CONSOLECAD_LOG_LEVEL"])
        return cls(
            manager.artifacts_root(config, project_path),
            template=manager.template_ref(config),
            **kwargs,
        )

    # -- Ledger helpers ---------------------------------------------------

    def _meta(self, project_id: str) -> RunMetadata:
        meta = self.ledger.get(project_id)
        if meta is None:
            raise ProjectNotFoundError(project_id)
        return meta

    def _commit(self, read: RunMetadata, updated: RunMetadata, now: str) -> RunMetadata:
        updated = updated.model_copy(update={"updated_at": now})
        return self.ledger.compare_and_swap(read.project_id, read.sequence, updated)

    # -- Projects ---------------------------------------------------------

    def create_project(self, name: str | None = None) -> RunMetadata:
        return proj_ops.create_project(self.store, self.ledger, now=self._clock(), name=name)

    def list_projects(self) -> list[RunMetadata]:
        return proj_ops.list_projects(self.store, self.ledger)

    def delete_project(self, project_id: str) -> None:
        proj_ops.delete_project(self.store, self.ledger, project_id)

    def run_metadata(self, project_id: str) -> RunMetadata:
        return self._meta(project_id)

    # -- CRG --------------------------------------------------------------

    def upload_crg(self, project_id: str, file_name: str, data: bytes) -> GeometryMetadata:
        """Store a reference mesh and record its metadata in the ledger."""
        meta = self._meta(project_id)
        now = self._clock()
        geometry = ingest_crg(file_name, data, now)
        previous = self.store.read_crg(project_id, geometry.original_filename)
        self.store.write_crg(project_id, geometry, data)
        updated = meta.model_copy(update={"crg": geometry}, deep=True)
        try:
            self._commit(meta, updated, now)
        except Exception:
            self.store.discard_crg(project_id, geometry, previous)
            raise
        return geometry

    # -- DIB --------------------------------------------------------------

    def save_draft(self, project_id: str, draft: dict[str, Any]) -> None:
        self._meta(project_id)
        self.store.write_draft(project_id, draft)

    def load_draft(self, project_id: str) -> dict[str, Any]:
        return self.store.read_draft(project_id) or {}

    def next_question(self, project_id: str) -> Question | None:
        """Next applicable question the saved draft has not answered."""
        return self.question_set.next_unanswered(self.load_draft(project_id))

    def confirm_brief(self, project_id: str, draft: dict[str, Any] | None = None) -> ConfirmResult:
        """Normalize the draft into the next DIB revision and persist it.

        A new DIB revision resets the project approval pointer, since earlier
        PSPECs no longer reflect the latest brief.
        """
        meta = self._meta(project_id)
        if draft is None:
            draft = self.load_draft(project_id)
        else:
            self.store.write_draft(project_id, draft)

        now = self._clock()
        result = normalize_brief(
            draft,
            meta.dib.latest_revision,
            project_id=project_id,
            now=now,
            question_set=self.question_set,
        )
        if not result.ok:
            return ConfirmResult(ok=False, errors=result.errors)

        dib = result.brief
        assert dib is not None
        self.store.write_dib_revision(project_id, dib)

        updated = approval.reset_for_new_brief(meta)
        updated.dib.revisions.append(DibRevisionEntry(
            revision=dib.revision,
            sha256=Hasher.hash_record(dib),
            confirmed_at=dib.confirmed_at,
        ))
        updated.dib.latest_revision = dib.revision
        try:
            self._commit(meta, updated, now)
        except Exception:
            self.store.discard_dib_revision(project_id, dib.revision)
            raise

        self.store.write_latest_dib(project_id, dib)
        logger.info("Confirmed DIB revision %d for %s", dib.revision, project_id)
        return ConfirmResult(ok=True, brief=dib)

    # -- PSPEC ------------------------------------------------------------

    def _current_brief(self, project_id: str, meta: RunMetadata) -> DesignIntentBrief:
        revision = meta.dib.latest_revision
        dib = self.store.read_dib_revision(project_id, revision)
        if dib is None:
            raise StorageError(f"DIB revision {revision} of {project_id} is missing.")
        recorded = next((e for e in meta.dib.revisions if e.revision == revision), None)
        if recorded is None or Hasher.hash_record(dib) != recorded.sha256:
            raise StorageError(f"DIB revision {revision} of {project_id} does not match its ledger hash.")
        return dib

    def generate_pspec(self, project_id: str) -> GenerateResult:
        """Synthesize, validate and map the next PSPEC revision.

        Runs schema validation, manufacturability checks and variable mapping
        on the synthesized record; any finding aborts with nothing written.
        On success the PSPEC, its summary and the variable map are persisted
        and the revision becomes the pending approval.

        Raises
        ------
        PreconditionError
            If no CRG has been uploaded or no DIB has been confirmed.
        """
        meta = self._meta(project_id)
        if meta.crg is None:
            raise PreconditionError("Upload a CRG before generating a PSPEC.")
        if meta.dib.latest_revision < 1:
            raise PreconditionError("Confirm the DIB before generating a PSPEC.")

        now = self._clock()
        dib = self._current_brief(project_id, meta)
        pspec = synthesize_pspec(dib, meta.crg, meta.pspec.latest_revision, now=now)

        schema_errors = validate_schema(pspec)
        feasibility = self.validator.validate(pspec)
        mapping = map_to_variables(pspec)
        if schema_errors or not feasibility.ok or not mapping.ok:
            logger.info("PSPEC generation for %s rejected", project_id)
            return GenerateResult(
                ok=False,
                schema_errors=schema_errors,
                manufacturability_errors=feasibility.errors,
                mapping_errors=mapping.errors,
            )

        summary_md = pspec_summary_markdown(pspec)
        entry = PspecRevisionEntry(
            revision=pspec.revision,
            sha256=Hasher.hash_record(pspec),
            summary_md_sha256=Hasher.hash_string(summary_md),
            created_at=pspec.created_at,
            dib_revision=dib.revision,
            dib_sha256=pspec.inputs.dib.sha256,
            crg_sha256=meta.crg.sha256,
        )

        self.store.write_pspec_revision(project_id, pspec, summary_md)
        try:
            self.store.write_mapping(project_id, pspec.revision, mapping)
            self._commit(meta, approval.mark_generated(meta, entry), now)
        except Exception:
            self.store.discard_pspec_revision(project_id, pspec.revision)
            raise

        self.store.write_latest_pspec(project_id, pspec, summary_md)
        logger.info("Generated PSPEC revision %d for %s", pspec.revision, project_id)
        return GenerateResult(ok=True, pspec=pspec, summary_md=summary_md)

    def pspec_summary(self, project_id: str, revision: int | None = None) -> str | None:
        """Summary Markdown of *revision*, or of the latest PSPEC."""
        return self.store.read_pspec_summary(project_id, revision)

    def read_pspec(self, project_id: str, revision: int | None = None) -> ParametricSpecification | None:
        if revision is None:
            return self.store.read_latest_pspec(project_id)
        return self.store.read_pspec_revision(project_id, revision)

    # -- Approval ---------------------------------------------------------

    def approve(self, project_id: str, revision: int) -> RunMetadata:
        """Approve the pending PSPEC revision.

        Raises
        ------
        ApprovalError
            If *revision* is not the pending revision.
        """
        meta = self._meta(project_id)
        now = self._clock()
        stored = self._commit(meta, approval.approve(meta, revision, now), now)
        logger.info("Approved PSPEC revision %d for %s", revision, project_id)
        return stored

    def reject(self, project_id: str, revision: int) -> RunMetadata:
        meta = self._meta(project_id)
        now = self._clock()
        stored = self._commit(meta, approval.reject(meta, revision, now), now)
        logger.info("Rejected PSPEC revision %d for %s", revision, project_id)
        return stored

    # -- CAD --------------------------------------------------------------

    def cad_variables(self, project_id: str, revision: int) -> dict[str, int]:
        return self.store.read_variables(project_id, revision)

    def generate_cad(
        self,
        project_id: str,
        revision: int,
        backend: CadBackend,
        *,
        force: bool = False,
    ) -> CadRunOutcome:
        """Drive *backend* with the persisted variable map of an approved revision.

        A previous SUCCESS run is returned as-is unless *force* is set, in
        which case the old record is archived first.  Backend failures are
        recorded as FAILED runs rather than raised.

        Raises
        ------
        PreconditionError
            If the revision does not exist or is not approved.
        """
        meta = self._meta(project_id)
        if meta.pspec_entry(revision) is None:
            raise PreconditionError(f"PSPEC revision {revision} not found.")
        if not approval.is_approved(meta, revision):
            raise PreconditionError("Approve this PSPEC revision before generating a CAD model.")

        existing = self.store.read_cad_run(project_id, revision)
        if existing is not None and existing.ok and not force:
            return CadRunOutcome(run=existing, reused=True)

        now = self._clock()
        if force and existing is not None:
            self.store.archive_cad_run(project_id, revision, now)

        run = CadRunRecord(timestamp=now, template=self.template)
        step: CadRunStep = "config"
        try:
            if not self.template.complete:
                raise CadBackendError("config", "Onshape template ids are not configured.")

            step = "load_variables"
            variables = self.store.read_variables(project_id, revision)
            units = {p.var: p.unit for p in self.store.read_provenance(project_id, revision)}

            step = "clone_template"
            generation = call_with_auth_retry(backend, lambda: backend.generate(
                self.template,
                project_id=project_id,
                revision=revision,
                variables=variables,
                units=units,
            ))
            run.status = CadRunStatus.SUCCESS
            run.created = CreatedDocument(did=generation.did, wid=generation.wid, eid=generation.eid)
            run.url = generation.url
            run.variables_applied = VariablesApplied(count=generation.variables_applied)
        except CadBackendError as exc:
            run.errors = [CadRunError(step=exc.step, message=exc.message)]
        except StorageError as exc:
            run.errors = [CadRunError(step=step, message=str(exc))]

        if not run.ok:
            logger.warning(
                "CAD generation failed for %s revision %d: %s",
                project_id, revision, run.primary_error(),
            )
        self.store.write_cad_run(project_id, revision, run)
        return CadRunOutcome(run=run, reused=False)

    def cad_run(self, project_id: str, revision: int) -> CadRunRecord | None:
        return self.store.read_cad_run(project_id, revision)
