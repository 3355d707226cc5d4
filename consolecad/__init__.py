"""console-cad: record-console design briefs to parametric specs and CAD variables."""

__version__ = "0.1.0"

from consolecad.api.errors import PreconditionError, ProjectNotFoundError
from consolecad.api.facade import ConfirmResult, ConsoleCad, GenerateResult
from consolecad.approval import ApprovalError
from consolecad.brief.normalizer import FieldError, NormalizeResult, normalize_brief
from consolecad.brief.questions import QUESTION_SET_V0_1, Question, QuestionSet
from consolecad.cad.backend import CadAuthError, CadBackend, CadBackendError, CadGeneration
from consolecad.cad.mapping import MappingResult, map_to_variables
from consolecad.cad.runs import CadRunOutcome, CadRunRecord, CadRunStatus, TemplateRef
from consolecad.config_manager import ConfigManager, configure_logging
from consolecad.intake.crg import CrgIntakeError, ingest_crg
from consolecad.models.brief import DesignIntentBrief
from consolecad.models.geometry import GeometryMetadata
from consolecad.models.pspec import ParametricSpecification
from consolecad.models.run_meta import ApprovalState, RunMetadata
from consolecad.spec.summary import pspec_summary_markdown
from consolecad.spec.synthesizer import synthesize_pspec
from consolecad.storage.fs import StorageError
from consolecad.storage.ledger import (
    FileLedgerStore,
    InMemoryLedgerStore,
    LedgerConflictError,
    LedgerStore,
)
from consolecad.storage.revisions import FileRevisionStore, RevisionExistsError
from consolecad.validation.manufacturability import ManufacturabilityResult, validate_manufacturability
from consolecad.validation.schema import SchemaError, validate_schema

__all__ = [
    "__version__",
    "ApprovalError",
    "ApprovalState",
    "CadAuthError",
    "CadBackend",
    "CadBackendError",
    "CadGeneration",
    "CadRunOutcome",
    "CadRunRecord",
    "CadRunStatus",
    "ConfigManager",
    "ConfirmResult",
    "ConsoleCad",
    "CrgIntakeError",
    "DesignIntentBrief",
    "FieldError",
    "FileLedgerStore",
    "FileRevisionStore",
    "GenerateResult",
    "GeometryMetadata",
    "InMemoryLedgerStore",
    "LedgerConflictError",
    "LedgerStore",
    "ManufacturabilityResult",
    "MappingResult",
    "NormalizeResult",
    "ParametricSpecification",
    "PreconditionError",
    "ProjectNotFoundError",
    "QUESTION_SET_V0_1",
    "Question",
    "QuestionSet",
    "RevisionExistsError",
    "RunMetadata",
    "SchemaError",
    "StorageError",
    "TemplateRef",
    "configure_logging",
    "ingest_crg",
    "map_to_variables",
    "normalize_brief",
    "pspec_summary_markdown",
    "synthesize_pspec",
    "validate_manufacturability",
    "validate_schema",
]
