"""Question set v0.1.0 for the ``record_console`` archetype.

Each question is data: a kind tag, the JSON pointer it stores its answer at,
whether it is required, numeric bounds or enum options, and an optional
dependency on another answer.  The normalizer walks this list once.
"""

from __future__ import annotations

import math
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from consolecad.brief.pointer import MISSING, get_by_pointer
from consolecad.config import ARCHETYPE_ID, DIB_VERSION, QUESTION_SET_VERSION

QuestionKind = Literal["confirm", "boolean", "enum", "number_mm", "number", "integer", "text"]


def is_finite_number(value: Any) -> bool:
    """True for int/float values that are finite as floats.  Booleans are not numbers.

    Integers too large to convert to a float (``10 ** 400`` parses from JSON
    as a plain ``int``) count as non-finite.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


class EqualsCondition(BaseModel):
    """Applies when the answer at *path* equals *equals* (same type, same value)."""

    model_config = ConfigDict(frozen=True)

    path: str
    equals: Any

    def holds(self, draft: dict[str, Any]) -> bool:
        value = get_by_pointer(draft, self.path)
        return type(value) is type(self.equals) and value == self.equals


class AtLeastCondition(BaseModel):
    """Applies when the answer at *path* is a number ``>= gte``."""

    model_config = ConfigDict(frozen=True)

    path: str
    gte: float

    def holds(self, draft: dict[str, Any]) -> bool:
        value = get_by_pointer(draft, self.path)
        return is_finite_number(value) and value >= self.gte


DependsOn = Union[EqualsCondition, AtLeastCondition]


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    group: str
    kind: QuestionKind
    prompt: str
    store_path: str
    required: bool
    default: Any = None
    """Pre-filled answer offered by the conversational UI; never applied silently."""

    min: float | None = None
    max: float | None = None
    options: tuple[str, ...] | None = None
    depends_on: DependsOn | None = None
    confirm_if_default: bool = False
    when_skipped: Any = None
    """Value written into the brief when the question does not apply."""

    def applies(self, draft: dict[str, Any]) -> bool:
        if self.depends_on is None:
            return True
        return self.depends_on.holds(draft)


class QuestionSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_set_version: str = QUESTION_SET_VERSION
    dib_version: str = DIB_VERSION
    archetype_id: str = ARCHETYPE_ID
    questions: tuple[Question, ...]

    def get(self, question_id: str) -> Question | None:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None

    def next_unanswered(self, draft: dict[str, Any]) -> Question | None:
        """First applicable question that has no answer in *draft* yet."""
        for q in self.questions:
            if not q.applies(draft):
                continue
            value = get_by_pointer(draft, q.store_path)
            if value is MISSING or value is None:
                return q
        return None


def _dimension_questions(group: str, base_path: str, label: str) -> list[Question]:
    return [
        Question(
            id=f"{group}.external.{axis}_mm",
            group=group,
            kind="number_mm",
            prompt=f"{label} external {axis} (mm)?",
            store_path=f"{base_path}/external_mm/{axis}_mm",
            required=True,
            min=1,
            max=10000,
        )
        for axis in ("width", "height", "depth")
    ]


QUESTION_SET_V0_1 = QuestionSet(
    questions=(
        Question(
            id="assumptions.confirm_archetype",
            group="assumptions",
            kind="confirm",
            prompt=(
                "This project uses the 'record console' archetype (left/right speaker bays, "
                "central electronics bay, record drawers). Continue?"
            ),
            store_path="/assumptions/archetype_confirmed",
            required=True,
        ),
        Question(
            id="assumptions.confirm_sealed_speakers",
            group="assumptions",
            kind="confirm",
            prompt="Speakers are treated as sealed-only (no ported enclosure design). Confirm?",
            store_path="/assumptions/sealed_speakers_confirmed",
            required=True,
        ),
        Question(
            id="overall.width_mm",
            group="overall",
            kind="number_mm",
            prompt="Overall cabinet width (mm)?",
            store_path="/overall/width_mm",
            required=True,
            min=1,
            max=10000,
        ),
        Question(
            id="overall.height_mm",
            group="overall",
            kind="number_mm",
            prompt="Overall cabinet height (mm)?",
            store_path="/overall/height_mm",
            required=True,
            min=1,
            max=10000,
        ),
        Question(
            id="overall.depth_mm",
            group="overall",
            kind="number_mm",
            prompt="Overall cabinet depth (mm)?",
            store_path="/overall/depth_mm",
            required=True,
            min=1,
            max=10000,
        ),
        Question(
            id="constraints.back_clearance_mm",
            group="constraints",
            kind="number_mm",
            prompt="Rear clearance for cables/airflow (mm)?",
            store_path="/constraints/back_clearance_mm",
            required=True,
            default=25,
            min=0,
            max=2000,
            confirm_if_default=True,
        ),
        Question(
            id="access.rear_service_hatch",
            group="access",
            kind="boolean",
            prompt="Rear service hatch for access/maintenance?",
            store_path="/access/rear_service_hatch",
            required=True,
        ),
        Question(
            id="material.type",
            group="material",
            kind="enum",
            prompt="Material type?",
            store_path="/material/type",
            required=True,
            default="plywood",
            options=("plywood", "mdf", "veneer_plywood", "other"),
            confirm_if_default=True,
        ),
        Question(
            id="material.thickness_mm",
            group="material",
            kind="number_mm",
            prompt="Material thickness (mm)?",
            store_path="/material/thickness_mm",
            required=True,
            default=18,
            min=1,
            max=2000,
            confirm_if_default=True,
        ),
        Question(
            id="material.notes",
            group="material",
            kind="text",
            prompt="If material is 'other', describe it briefly (optional otherwise).",
            store_path="/material/notes",
            required=False,
            depends_on=EqualsCondition(path="/material/type", equals="other"),
        ),
        *_dimension_questions("speakers", "/speakers", "Speaker"),
        Question(
            id="speakers.weight_kg",
            group="speakers",
            kind="number",
            prompt="Single-speaker weight (kg)?",
            store_path="/speakers/weight_kg",
            required=True,
            min=0.01,
            max=500,
        ),
        Question(
            id="speakers.required_clearance_mm",
            group="speakers",
            kind="number_mm",
            prompt=(
                "Required clearance around each speaker (mm) "
                "(applies to all sides unless you specify otherwise later)?"
            ),
            store_path="/speakers/required_clearance_mm",
            required=True,
            min=0,
            max=2000,
        ),
        Question(
            id="speakers.isolation.strategy",
            group="speakers",
            kind="enum",
            prompt="Speaker isolation strategy?",
            store_path="/speakers/isolation/strategy",
            required=True,
            options=("none", "foam_pad", "sorbothane_feet", "spikes", "floating_shelf", "other"),
        ),
        Question(
            id="speakers.isolation.notes",
            group="speakers",
            kind="text",
            prompt="If isolation is 'other', describe it briefly (optional otherwise).",
            store_path="/speakers/isolation/notes",
            required=False,
            depends_on=EqualsCondition(path="/speakers/isolation/strategy", equals="other"),
        ),
        *_dimension_questions("turntable", "/turntable", "Turntable"),
        Question(
            id="turntable.isolation",
            group="turntable",
            kind="boolean",
            prompt="Turntable isolation required?",
            store_path="/turntable/isolation",
            required=True,
        ),
        *_dimension_questions("amplifier", "/amplifier", "Amplifier"),
        Question(
            id="amplifier.ventilation_direction",
            group="amplifier",
            kind="enum",
            prompt="Amplifier ventilation direction?",
            store_path="/amplifier/ventilation_direction",
            required=True,
            options=("front", "rear", "up", "left", "right"),
        ),
        Question(
            id="amplifier.required_clearance_mm",
            group="amplifier",
            kind="number_mm",
            prompt=(
                "Required clearance around amplifier for cables/airflow (mm) "
                "(applies to all sides unless you specify otherwise later)?"
            ),
            store_path="/amplifier/required_clearance_mm",
            required=True,
            min=0,
            max=2000,
        ),
        Question(
            id="drawers.count",
            group="drawers",
            kind="integer",
            prompt="How many record drawers?",
            store_path="/drawers/count",
            required=True,
            default=2,
            min=0,
            max=6,
            confirm_if_default=True,
        ),
        Question(
            id="drawers.lp_capacity_target",
            group="drawers",
            kind="integer",
            prompt="LP capacity target (total records)?",
            store_path="/drawers/lp_capacity_target",
            required=True,
            min=0,
            max=3000,
            depends_on=AtLeastCondition(path="/drawers/count", gte=1),
            when_skipped=0,
        ),
        Question(
            id="output_profile",
            group="output",
            kind="enum",
            prompt="Output profile?",
            store_path="/output_profile",
            required=True,
            options=("hand_tools", "panel_saw", "cnc_shop"),
        ),
        Question(
            id="confirm_dib_authoritative",
            group="confirmation",
            kind="confirm",
            prompt=(
                "Confirm these answers as authoritative "
                "(this will lock the DIB revision used to generate PSPEC)?"
            ),
            store_path="/confirmed",
            required=True,
        ),
    ),
)
