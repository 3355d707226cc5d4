"""Tests for the question set and the brief normalizer."""

from __future__ import annotations

from consolecad.brief.normalizer import normalize_brief, validate_draft
from consolecad.brief.questions import QUESTION_SET_V0_1

from conftest import NOW, PROJECT_ID


def _errors(draft):
    _, errors = validate_draft(draft)
    return {(e.path, e.message) for e in errors}


# ── QuestionSet ──────────────────────────────────────────────────────────────

class TestQuestionSet:

    def test_first_question_on_empty_draft(self):
        q = QUESTION_SET_V0_1.next_unanswered({})
        assert q is not None
        assert q.id == "assumptions.confirm_archetype"

    def test_complete_draft_has_no_next_question(self, make_draft):
        assert QUESTION_SET_V0_1.next_unanswered(make_draft()) is None

    def test_next_question_follows_order(self, make_draft):
        draft = make_draft()
        del draft["overall"]["height_mm"]
        assert QUESTION_SET_V0_1.next_unanswered(draft).id == "overall.height_mm"

    def test_capacity_question_depends_on_drawer_count(self, make_draft):
        q = QUESTION_SET_V0_1.get("drawers.lp_capacity_target")
        assert q.applies(make_draft({"/drawers/count": 1}))
        assert not q.applies(make_draft({"/drawers/count": 0}))

    def test_material_notes_only_for_other(self, make_draft):
        q = QUESTION_SET_V0_1.get("material.notes")
        assert not q.applies(make_draft())
        assert q.applies(make_draft({"/material/type": "other"}))

    def test_defaults_are_not_applied_silently(self):
        q = QUESTION_SET_V0_1.get("constraints.back_clearance_mm")
        assert q.default == 25
        assert q.confirm_if_default
        _, errors = validate_draft({})
        assert any(e.path == "/constraints/back_clearance_mm" for e in errors)


# ── normalize_brief ──────────────────────────────────────────────────────────

class TestNormalizeBrief:

    def test_happy_path(self, make_draft):
        result = normalize_brief(make_draft(), 0, project_id=PROJECT_ID, now=NOW)
        assert result.ok
        dib = result.brief
        assert dib.revision == 1
        assert dib.project_id == PROJECT_ID
        assert dib.created_at == dib.confirmed_at == NOW
        assert dib.overall.depth_mm == 450
        assert dib.speakers.required_clearance_mm == 10
        assert dib.drawers.lp_capacity_target == 200
        assert dib.confirmed is True

    def test_revision_follows_prior_count(self, make_draft):
        result = normalize_brief(make_draft(), 3, project_id=PROJECT_ID, now=NOW)
        assert result.brief.revision == 4

    def test_missing_required_answer(self, make_draft):
        draft = make_draft()
        del draft["overall"]["width_mm"]
        result = normalize_brief(draft, 0, project_id=PROJECT_ID, now=NOW)
        assert not result.ok
        assert result.brief is None
        assert ("/overall/width_mm", "Required.") in {(e.path, e.message) for e in result.errors}

    def test_null_counts_as_missing(self, make_draft):
        assert ("/overall/width_mm", "Required.") in _errors(make_draft({"/overall/width_mm": None}))

    def test_unconfirmed_brief_rejected(self, make_draft):
        assert ("/confirmed", "Must be confirmed.") in _errors(make_draft({"/confirmed": False}))

    def test_unknown_enum_option(self, make_draft):
        errors = _errors(make_draft({"/material/type": "bamboo"}))
        assert ("/material/type", "Must be one of: plywood, mdf, veneer_plywood, other") in errors

    def test_range_violations(self, make_draft):
        errors = _errors(make_draft({"/overall/width_mm": 0, "/drawers/count": 7}))
        assert ("/overall/width_mm", "Must be >= 1.") in errors
        assert ("/drawers/count", "Must be <= 6.") in errors

    def test_type_violations(self, make_draft):
        errors = _errors(make_draft({
            "/drawers/count": 2.5,
            "/speakers/weight_kg": True,
            "/access/rear_service_hatch": "yes",
        }))
        assert ("/drawers/count", "Must be an integer.") in errors
        assert ("/speakers/weight_kg", "Must be a number.") in errors
        assert ("/access/rear_service_hatch", "Must be true/false.") in errors

    def test_integers_beyond_float_range_reported(self, make_draft):
        draft = make_draft({"/overall/width_mm": 10 ** 400, "/drawers/count": 10 ** 400})
        result = normalize_brief(draft, 0, project_id=PROJECT_ID, now=NOW)
        assert not result.ok
        errors = {(e.path, e.message) for e in result.errors}
        assert ("/overall/width_mm", "Must be a number.") in errors
        assert ("/drawers/count", "Must be an integer.") in errors

    def test_back_clearance_must_be_less_than_depth(self, make_draft):
        errors = _errors(make_draft({"/constraints/back_clearance_mm": 450}))
        assert ("/constraints/back_clearance_mm", "Must be less than overall depth.") in errors

    def test_all_errors_reported_together(self, make_draft):
        draft = make_draft({"/material/type": "bamboo", "/confirmed": False})
        del draft["amplifier"]
        _, errors = validate_draft(draft)
        paths = {e.path for e in errors}
        assert {"/material/type", "/confirmed", "/amplifier/ventilation_direction"} <= paths

    def test_skipped_capacity_written_as_zero(self, make_draft):
        draft = make_draft({"/drawers/count": 0, "/drawers/lp_capacity_target": 500})
        result = normalize_brief(draft, 0, project_id=PROJECT_ID, now=NOW)
        assert result.ok
        assert result.brief.drawers.lp_capacity_target == 0

    def test_inapplicable_notes_are_dropped(self, make_draft):
        draft = make_draft({"/material/notes": "leftover"})
        result = normalize_brief(draft, 0, project_id=PROJECT_ID, now=NOW)
        assert result.brief.material.notes is None

        draft = make_draft({"/material/type": "other", "/material/notes": "reclaimed oak"})
        result = normalize_brief(draft, 0, project_id=PROJECT_ID, now=NOW)
        assert result.brief.material.notes == "reclaimed oak"

    def test_whole_floats_coerced_for_integer_answers(self, make_draft):
        result = normalize_brief(make_draft({"/drawers/count": 3.0}), 0, project_id=PROJECT_ID, now=NOW)
        assert result.brief.drawers.count == 3
        assert isinstance(result.brief.drawers.count, int)
