"""CAD integration: variable mapping, backends and run records."""

from consolecad.cad.backend import (
    CadAuthError,
    CadBackend,
    CadBackendError,
    CadGeneration,
    call_with_auth_retry,
)
from consolecad.cad.mapping import (
    MappingError,
    MappingErrorCode,
    MappingResult,
    VariableProvenance,
    VariableSource,
    VariableUnit,
    contract_variable_names,
    map_to_variables,
)
from consolecad.cad.runs import CadRunError, CadRunOutcome, CadRunRecord, CadRunStatus, TemplateRef

__all__ = [
    "CadAuthError",
    "CadBackend",
    "CadBackendError",
    "CadGeneration",
    "CadRunError",
    "CadRunOutcome",
    "CadRunRecord",
    "CadRunStatus",
    "MappingError",
    "MappingErrorCode",
    "MappingResult",
    "TemplateRef",
    "VariableProvenance",
    "VariableSource",
    "VariableUnit",
    "call_with_auth_retry",
    "contract_variable_names",
    "map_to_variables",
]
