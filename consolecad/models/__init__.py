"""Typed records: DIB, PSPEC, CRG metadata and the run ledger."""

from consolecad.models.brief import DesignIntentBrief
from consolecad.models.common import Clearance, Dimensions
from consolecad.models.geometry import CrgFormat, GeometryMetadata
from consolecad.models.pspec import ParametricSpecification
from consolecad.models.run_meta import ApprovalPointer, ApprovalState, RunMetadata

__all__ = [
    "ApprovalPointer",
    "ApprovalState",
    "Clearance",
    "CrgFormat",
    "DesignIntentBrief",
    "Dimensions",
    "GeometryMetadata",
    "ParametricSpecification",
    "RunMetadata",
]
