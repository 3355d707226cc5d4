"""Tests for PSPEC synthesis and the summary renderer."""

from __future__ import annotations

from consolecad.spec.summary import pspec_summary_markdown
from consolecad.spec.synthesizer import synthesize_pspec
from consolecad.storage.hasher import Hasher

from conftest import NOW


class TestSynthesizePspec:

    def test_copies_brief_fields(self, make_brief, geometry):
        dib = make_brief()
        pspec = synthesize_pspec(dib, geometry, 0, now=NOW)
        assert pspec.revision == 1
        assert pspec.project_id == dib.project_id
        assert pspec.created_at == NOW
        assert pspec.units == "mm"
        assert pspec.overall == dib.overall
        assert pspec.material == dib.material
        assert pspec.components.drawers == dib.drawers
        assert pspec.output_profile == "panel_saw"

    def test_records_input_lineage(self, make_brief, geometry):
        dib = make_brief()
        pspec = synthesize_pspec(dib, geometry, 0, now=NOW)
        assert pspec.inputs.crg == geometry
        assert pspec.inputs.dib.revision == dib.revision
        assert pspec.inputs.dib.sha256 == Hasher.hash_record(dib)
        assert pspec.inputs.dib.confirmed_at == dib.confirmed_at

    def test_clearances_applied_to_all_sides(self, make_pspec):
        comps = make_pspec().components
        for side in ("left_mm", "right_mm", "top_mm", "bottom_mm", "front_mm", "rear_mm"):
            assert getattr(comps.speakers.clearance_mm, side) == 10
            assert getattr(comps.amplifier.clearance_mm, side) == 20
            assert getattr(comps.turntable.clearance_mm, side) == 0

    def test_fixed_archetype(self, make_pspec):
        pspec = make_pspec()
        assert pspec.archetype.id == "record_console"
        assert pspec.archetype.speaker_enclosure_type == "sealed"
        assert pspec.components.speakers.count == 2

    def test_revision_follows_prior_count(self, make_pspec):
        assert make_pspec(prior=4).revision == 5

    def test_deterministic(self, make_brief, geometry):
        dib = make_brief()
        a = synthesize_pspec(dib, geometry, 0, now=NOW)
        b = synthesize_pspec(dib, geometry, 0, now=NOW)
        assert a == b
        assert Hasher.hash_record(a) == Hasher.hash_record(b)

    def test_available_depth_unrounded(self, make_pspec):
        pspec = make_pspec({"/overall/depth_mm": 450.6, "/constraints/back_clearance_mm": 25.4})
        assert abs(pspec.available_depth_mm - 425.2) < 1e-9


class TestSummary:

    def test_summary_contents(self, make_pspec):
        md = pspec_summary_markdown(make_pspec())
        assert md.startswith("# PSPEC Summary\n")
        assert md.endswith("\n")
        assert "- Available depth (depth - back clearance): 425 mm" in md
        assert "- Clearance (all sides): 10 mm" in md
        assert "concept.glb" in md

    def test_summary_is_stable(self, make_pspec):
        pspec = make_pspec()
        assert pspec_summary_markdown(pspec) == pspec_summary_markdown(pspec)
