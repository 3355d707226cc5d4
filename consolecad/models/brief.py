"""DesignIntentBrief (DIB): the authoritative, user-confirmed design brief.

A DIB revision is written once and never mutated; later answers produce a new
revision with the next revision number.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from consolecad.config import DIB_VERSION
from consolecad.models.common import (
    Access,
    Constraints,
    Dimensions,
    Drawers,
    Isolation,
    Material,
    RecordModel,
)


class Assumptions(RecordModel):
    archetype_confirmed: bool
    sealed_speakers_confirmed: bool


class BriefSpeakers(RecordModel):
    external_mm: Dimensions
    weight_kg: float
    required_clearance_mm: float
    """Single scalar clearance, later applied to all six sides."""

    isolation: Isolation


class BriefTurntable(RecordModel):
    external_mm: Dimensions
    isolation: bool


class BriefAmplifier(RecordModel):
    external_mm: Dimensions
    ventilation_direction: str
    required_clearance_mm: float


class DesignIntentBrief(RecordModel):
    """One confirmed revision of the design brief."""

    dib_version: str = DIB_VERSION
    project_id: str
    revision: int = Field(ge=1)
    created_at: str
    confirmed_at: str

    assumptions: Assumptions
    overall: Dimensions
    constraints: Constraints
    access: Access
    material: Material
    speakers: BriefSpeakers
    turntable: BriefTurntable
    amplifier: BriefAmplifier
    drawers: Drawers
    output_profile: str

    confirmed: Literal[True] = True
