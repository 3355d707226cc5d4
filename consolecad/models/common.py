"""Shared building blocks for immutable revision records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RecordModel(BaseModel):
    """Base for records that are immutable once written."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class Dimensions(RecordModel):
    """External envelope (width × height × depth), millimetres."""

    width_mm: float
    height_mm: float
    depth_mm: float


class Clearance(RecordModel):
    """Six-sided clearance envelope around a component, millimetres."""

    left_mm: float
    right_mm: float
    top_mm: float
    bottom_mm: float
    front_mm: float
    rear_mm: float

    @classmethod
    def uniform(cls, mm: float) -> Clearance:
        """Apply one scalar clearance to all six sides."""
        return cls(
            left_mm=mm,
            right_mm=mm,
            top_mm=mm,
            bottom_mm=mm,
            front_mm=mm,
            rear_mm=mm,
        )


class Constraints(RecordModel):
    back_clearance_mm: float


class Access(RecordModel):
    rear_service_hatch: bool


class Material(RecordModel):
    type: str
    thickness_mm: float
    notes: str | None = None


class Isolation(RecordModel):
    strategy: str
    notes: str | None = None


class Drawers(RecordModel):
    count: int
    lp_capacity_target: int
