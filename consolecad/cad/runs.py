"""CAD run records (``onshape.run.json``)."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

CadRunStep = Literal["config", "load_variables", "clone_template", "apply_variables", "regenerate"]


class CadRunStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class TemplateRef(BaseModel):
    """Onshape template document/workspace/element ids."""

    did: str = ""
    wid: str = ""
    eid: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.did and self.wid and self.eid)


class CreatedDocument(BaseModel):
    did: str | None = None
    wid: str | None = None
    eid: str | None = None


class CadRunError(BaseModel):
    step: CadRunStep
    message: str


class VariablesApplied(BaseModel):
    count: int = 0


class CadRunRecord(BaseModel):
    """Outcome of one CAD generation attempt for one PSPEC revision."""

    status: CadRunStatus = CadRunStatus.FAILED
    timestamp: str
    template: TemplateRef = Field(default_factory=TemplateRef)
    created: CreatedDocument = Field(default_factory=CreatedDocument)
    url: str | None = None
    variables_applied: VariablesApplied = Field(default_factory=VariablesApplied)
    errors: list[CadRunError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == CadRunStatus.SUCCESS

    def primary_error(self) -> str | None:
        if not self.errors:
            return None
        first = self.errors[0]
        return f"[{first.step}] {first.message}"


class CadRunOutcome(BaseModel):
    run: CadRunRecord
    reused: bool = False
