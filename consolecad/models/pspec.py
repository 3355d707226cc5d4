"""ParametricSpecification (PSPEC): the synthesized, CAD-driving record.

Built from exactly one DIB revision plus CRG metadata.  Derived values
(per-side clearances) are computed once at synthesis and frozen here.
"""

from __future__ import annotations

from typing import Union

from pydantic import Field

from consolecad.config import (
    ARCHETYPE_ID,
    ARCHETYPE_VERSION,
    PSPEC_VERSION,
    SPEAKER_COUNT,
    SPEAKER_ENCLOSURE_TYPE,
)
from consolecad.models.common import (
    Access,
    Clearance,
    Constraints,
    Dimensions,
    Drawers,
    Isolation,
    Material,
    RecordModel,
)
from consolecad.models.geometry import GeometryMetadata


class Archetype(RecordModel):
    id: str = ARCHETYPE_ID
    version: str = ARCHETYPE_VERSION
    speaker_enclosure_type: str = SPEAKER_ENCLOSURE_TYPE


class DibInput(RecordModel):
    revision: int = Field(ge=1)
    sha256: str
    confirmed_at: str


class SpecInputs(RecordModel):
    crg: GeometryMetadata
    dib: DibInput


# -- Black-box components -------------------------------------------------
# Each variant carries the same envelope pair (external_mm, clearance_mm)
# plus its own kind-specific fields.


class SpeakerPair(RecordModel):
    count: int = SPEAKER_COUNT
    enclosure_type: str = SPEAKER_ENCLOSURE_TYPE
    external_mm: Dimensions
    weight_kg: float
    clearance_mm: Clearance
    isolation: Isolation


class TurntableSpec(RecordModel):
    external_mm: Dimensions
    isolation: bool
    clearance_mm: Clearance


class AmplifierSpec(RecordModel):
    external_mm: Dimensions
    ventilation_direction: str
    clearance_mm: Clearance


BlackBoxComponent = Union[SpeakerPair, TurntableSpec, AmplifierSpec]


class Components(RecordModel):
    speakers: SpeakerPair
    turntable: TurntableSpec
    amplifier: AmplifierSpec
    drawers: Drawers

    def black_boxes(self) -> list[tuple[str, BlackBoxComponent]]:
        """Return ``(kind, component)`` pairs in a fixed order."""
        return [
            ("speakers", self.speakers),
            ("amplifier", self.amplifier),
            ("turntable", self.turntable),
        ]


class ParametricSpecification(RecordModel):
    """One revision of the parametric specification."""

    pspec_version: str = PSPEC_VERSION
    project_id: str
    revision: int = Field(ge=1)
    created_at: str
    units: str = "mm"
    archetype: Archetype = Field(default_factory=Archetype)
    inputs: SpecInputs
    overall: Dimensions
    material: Material
    constraints: Constraints
    access: Access
    output_profile: str
    components: Components
    notes: str | None = None

    @property
    def available_depth_mm(self) -> float:
        """Cabinet depth minus the reserved rear clearance (unrounded)."""
        return self.overall.depth_mm - self.constraints.back_clearance_mm
