"""Shared fixtures: a complete draft for the reference console and helpers around it."""

from __future__ import annotations

import copy
from typing import Any, Callable

import pytest

from consolecad.brief.normalizer import normalize_brief
from consolecad.brief.pointer import set_by_pointer
from consolecad.intake.crg import ingest_crg
from consolecad.models.brief import DesignIntentBrief
from consolecad.models.geometry import GeometryMetadata
from consolecad.models.pspec import ParametricSpecification
from consolecad.spec.synthesizer import synthesize_pspec

NOW = "2026-01-01T00:00:00.000Z"
PROJECT_ID = "prj_test01"
CRG_BYTES = b"glTF\x02\x00\x00\x00reference-mesh"

# Available depth 425mm; every component envelope fits at 300mm as well.
BASE_DRAFT: dict[str, Any] = {
    "assumptions": {"archetype_confirmed": True, "sealed_speakers_confirmed": True},
    "overall": {"width_mm": 2000, "height_mm": 900, "depth_mm": 450},
    "constraints": {"back_clearance_mm": 25},
    "access": {"rear_service_hatch": True},
    "material": {"type": "plywood", "thickness_mm": 18},
    "speakers": {
        "external_mm": {"width_mm": 200, "height_mm": 300, "depth_mm": 250},
        "weight_kg": 8.5,
        "required_clearance_mm": 10,
        "isolation": {"strategy": "foam_pad"},
    },
    "turntable": {
        "external_mm": {"width_mm": 450, "height_mm": 150, "depth_mm": 280},
        "isolation": True,
    },
    "amplifier": {
        "external_mm": {"width_mm": 430, "height_mm": 120, "depth_mm": 240},
        "ventilation_direction": "up",
        "required_clearance_mm": 20,
    },
    "drawers": {"count": 2, "lp_capacity_target": 200},
    "output_profile": "panel_saw",
    "confirmed": True,
}


def _apply(draft: dict[str, Any], overrides: dict[str, Any] | None) -> dict[str, Any]:
    for pointer, value in (overrides or {}).items():
        set_by_pointer(draft, pointer, value)
    return draft


@pytest.fixture
def make_draft() -> Callable[..., dict[str, Any]]:
    """Factory: a fresh copy of the base draft with ``{pointer: value}`` overrides."""

    def _make(overrides: dict[str, Any] | None = None) -> dict[str, Any]:
        return _apply(copy.deepcopy(BASE_DRAFT), overrides)

    return _make


@pytest.fixture
def geometry() -> GeometryMetadata:
    return ingest_crg("concept.glb", CRG_BYTES, NOW)


@pytest.fixture
def make_brief(make_draft) -> Callable[..., DesignIntentBrief]:
    def _make(overrides: dict[str, Any] | None = None, prior: int = 0) -> DesignIntentBrief:
        result = normalize_brief(make_draft(overrides), prior, project_id=PROJECT_ID, now=NOW)
        assert result.ok, result.errors
        return result.brief

    return _make


@pytest.fixture
def make_pspec(make_brief, geometry) -> Callable[..., ParametricSpecification]:
    def _make(overrides: dict[str, Any] | None = None, prior: int = 0) -> ParametricSpecification:
        return synthesize_pspec(make_brief(overrides), geometry, prior, now=NOW)

    return _make
