"""CAD variable mapper: PSPEC to the flat Onshape variable map.

The template contract is a fixed table of variable definitions.  Every
definition is evaluated independently in one pass; if any of them fails, the
whole result is discarded and only the (sorted) errors are returned.

Rounding: dimensional values round to the nearest millimetre with ties away
from zero (see :func:`consolecad.units.round_mm`).  The derived
``OVERALL_AVAILABLE_DEPTH`` subtracts first and rounds once:
``round(depth_mm - back_clearance_mm)``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from consolecad.brief.pointer import MISSING, get_by_pointer
from consolecad.brief.questions import is_finite_number
from consolecad.config import ONSHAPE_TEMPLATE_CONTRACT_VERSION
from consolecad.units import round_mm

logger = logging.getLogger(__name__)

VARIABLE_NAME_PATTERN = r"^[A-Z][A-Z0-9_]*$"


class VariableUnit(str, Enum):
    MM = "mm"
    COUNT = "count"
    FLAG = "flag"
    ENUM = "enum"


class VariableSource(str, Enum):
    """Where a mapped value came from."""

    DIB = "DIB"
    """Copied from a user-confirmed DIB answer."""

    DEFAULT = "DEFAULT"
    """Fixed by this PSPEC version; not user-configurable."""

    DERIVED = "DERIVED"
    """Computed from one or more DIB answers."""


class MappingErrorCode(str, Enum):
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_VALUE = "INVALID_VALUE"
    OUT_OF_RANGE = "OUT_OF_RANGE"


class VariableRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int
    max: int

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max


class VariableDef(BaseModel):
    """One row of the template contract."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(pattern=VARIABLE_NAME_PATTERN)
    kind: Literal["number", "flag", "enum", "difference"]
    unit: VariableUnit
    source: VariableSource
    pspec_path: str
    range: VariableRange | None = None
    rounding: bool = False
    codes: dict[str, int] | None = None
    """String → integer code table for ``enum`` variables."""

    operands: tuple[str, str] | None = None
    """Minuend and subtrahend pointers for ``difference`` variables."""

    notes: str | None = None


class VariableProvenance(BaseModel):
    var: str
    value: int
    unit: VariableUnit
    source: VariableSource
    pspec_path: str
    notes: str | None = None


class MappingError(BaseModel):
    code: MappingErrorCode
    var: str
    pspec_path: str | None = None
    message: str


class MappingResult(BaseModel):
    ok: bool
    contract_version: str = ONSHAPE_TEMPLATE_CONTRACT_VERSION
    variables: dict[str, int] = Field(default_factory=dict)
    provenance: list[VariableProvenance] = Field(default_factory=list)
    errors: list[MappingError] = Field(default_factory=list)


# -- Contract table -----------------------------------------------------------

MM_POSITIVE = VariableRange(min=1, max=10000)
MM_CLEARANCE = VariableRange(min=0, max=2000)

MATERIAL_TYPE_CODES = {"plywood": 0, "mdf": 1, "veneer_plywood": 2, "other": 3}
VENT_DIRECTION_CODES = {"front": 0, "rear": 1, "up": 2, "left": 3, "right": 4}

_SIDES = (
    ("L", "left_mm"),
    ("R", "right_mm"),
    ("T", "top_mm"),
    ("B", "bottom_mm"),
    ("F", "front_mm"),
    ("REAR", "rear_mm"),
)

_SPEAKER_CLR_NOTE = (
    "Derived in PSPEC v0.1: clearance_mm is applied equally to all sides "
    "from DIB speakers.required_clearance_mm."
)
_AMP_CLR_NOTE = (
    "Derived in PSPEC v0.1: clearance_mm is applied equally to all sides "
    "from DIB amplifier.required_clearance_mm."
)
_TURNTABLE_CLR_NOTE = "Default in PSPEC v0.1: turntable clearance_mm is always 0."


def _mm(name: str, path: str, rng: VariableRange = MM_POSITIVE, **extra: Any) -> VariableDef:
    return VariableDef(
        name=name,
        kind="number",
        unit=VariableUnit.MM,
        source=extra.pop("source", VariableSource.DIB),
        pspec_path=path,
        range=rng,
        rounding=True,
        **extra,
    )


def _envelope(prefix: str, base: str, source: VariableSource, note: str) -> list[VariableDef]:
    defs = [
        _mm(f"{prefix}_W", f"{base}/external_mm/width_mm"),
        _mm(f"{prefix}_H", f"{base}/external_mm/height_mm"),
        _mm(f"{prefix}_D", f"{base}/external_mm/depth_mm"),
    ]
    defs.extend(
        _mm(
            f"{prefix}_CLR_{suffix}",
            f"{base}/clearance_mm/{field}",
            MM_CLEARANCE,
            source=source,
            notes=note,
        )
        for suffix, field in _SIDES
    )
    return defs


def _build_contract() -> tuple[VariableDef, ...]:
    defs: list[VariableDef] = [
        _mm("OVERALL_W", "/overall/width_mm"),
        _mm("OVERALL_H", "/overall/height_mm"),
        _mm("OVERALL_D", "/overall/depth_mm"),
        _mm("OVERALL_BACK_CLEARANCE", "/constraints/back_clearance_mm", MM_CLEARANCE),
        VariableDef(
            name="OVERALL_AVAILABLE_DEPTH",
            kind="difference",
            unit=VariableUnit.MM,
            source=VariableSource.DERIVED,
            pspec_path="DERIVED: /overall/depth_mm - /constraints/back_clearance_mm",
            operands=("/overall/depth_mm", "/constraints/back_clearance_mm"),
            range=MM_POSITIVE,
            rounding=True,
            notes="Derived: round(overall.depth_mm - constraints.back_clearance_mm).",
        ),
        _mm("MAT_THICKNESS", "/material/thickness_mm", VariableRange(min=1, max=2000)),
        VariableDef(
            name="MAT_TYPE_CODE",
            kind="enum",
            unit=VariableUnit.ENUM,
            source=VariableSource.DIB,
            pspec_path="/material/type",
            codes=MATERIAL_TYPE_CODES,
            range=VariableRange(min=0, max=len(MATERIAL_TYPE_CODES) - 1),
        ),
    ]

    # The PSPEC models the speakers as one symmetric pair; the template has
    # independent left and right bays.
    for side in ("L", "R"):
        defs.extend(_envelope(
            f"SPK_{side}", "/components/speakers", VariableSource.DERIVED, _SPEAKER_CLR_NOTE,
        ))

    defs.extend(_envelope(
        "TURNTABLE", "/components/turntable", VariableSource.DEFAULT, _TURNTABLE_CLR_NOTE,
    ))
    defs.extend(_envelope(
        "AMP", "/components/amplifier", VariableSource.DERIVED, _AMP_CLR_NOTE,
    ))

    defs += [
        VariableDef(
            name="AMP_VENT_DIR_CODE",
            kind="enum",
            unit=VariableUnit.ENUM,
            source=VariableSource.DIB,
            pspec_path="/components/amplifier/ventilation_direction",
            codes=VENT_DIRECTION_CODES,
            range=VariableRange(min=0, max=len(VENT_DIRECTION_CODES) - 1),
        ),
        VariableDef(
            name="DRAWER_COUNT",
            kind="number",
            unit=VariableUnit.COUNT,
            source=VariableSource.DIB,
            pspec_path="/components/drawers/count",
            range=VariableRange(min=0, max=6),
        ),
        VariableDef(
            name="DRAWER_LP_CAP_TARGET",
            kind="number",
            unit=VariableUnit.COUNT,
            source=VariableSource.DIB,
            pspec_path="/components/drawers/lp_capacity_target",
            range=VariableRange(min=0, max=3000),
        ),
        VariableDef(
            name="ACCESS_REAR_SERVICE_HATCH",
            kind="flag",
            unit=VariableUnit.FLAG,
            source=VariableSource.DIB,
            pspec_path="/access/rear_service_hatch",
        ),
    ]
    return tuple(defs)


TEMPLATE_CONTRACT: tuple[VariableDef, ...] = _build_contract()


def contract_variable_names() -> list[str]:
    """Sorted names of every variable the template contract defines."""
    return sorted(d.name for d in TEMPLATE_CONTRACT)


# -- Evaluation ---------------------------------------------------------------


def _error(d: VariableDef, code: MappingErrorCode, message: str) -> MappingError:
    return MappingError(code=code, var=d.name, pspec_path=d.pspec_path, message=message)


def _finish_number(d: VariableDef, value: float) -> int | MappingError:
    if d.rounding:
        n = round_mm(value)
    elif isinstance(value, int) or value.is_integer():
        n = int(value)
    else:
        return _error(d, MappingErrorCode.INVALID_VALUE, "Expected an integer value.")
    if d.range is not None and not d.range.contains(n):
        return _error(
            d,
            MappingErrorCode.OUT_OF_RANGE,
            f"Value {n} is outside allowed range {d.range.min}..{d.range.max}.",
        )
    return n


def _missing(value: Any) -> bool:
    return value is MISSING or value is None


def _evaluate(d: VariableDef, data: Any) -> int | MappingError:
    if d.kind == "difference":
        assert d.operands is not None
        a, b = (get_by_pointer(data, p) for p in d.operands)
        if _missing(a) or _missing(b):
            return _error(d, MappingErrorCode.MISSING_FIELD, "Missing required PSPEC field.")
        if not (is_finite_number(a) and is_finite_number(b)):
            return _error(d, MappingErrorCode.INVALID_VALUE, "Expected finite numeric operands.")
        difference = a - b
        if not is_finite_number(difference):
            return _error(d, MappingErrorCode.OUT_OF_RANGE, "Derived value is not finite.")
        return _finish_number(d, difference)

    value = get_by_pointer(data, d.pspec_path)
    if _missing(value):
        return _error(d, MappingErrorCode.MISSING_FIELD, "Missing required PSPEC field.")

    if d.kind == "flag":
        if not isinstance(value, bool):
            return _error(d, MappingErrorCode.INVALID_VALUE, "Expected a boolean value.")
        return 1 if value else 0

    if d.kind == "enum":
        codes = d.codes or {}
        if not isinstance(value, str) or value not in codes:
            field = d.pspec_path.strip("/").replace("/", ".")
            return _error(d, MappingErrorCode.INVALID_VALUE, f"Unexpected {field}: {value!r}.")
        return _finish_number(d, codes[value])

    if not is_finite_number(value):
        return _error(
            d,
            MappingErrorCode.INVALID_VALUE,
            f"Expected a finite number, got {type(value).__name__}.",
        )
    return _finish_number(d, value)


def map_to_variables(pspec: Any) -> MappingResult:
    """Project a PSPEC onto the template variable contract.

    Parameters
    ----------
    pspec:
        A :class:`ParametricSpecification` or the equivalent plain mapping.

    Returns
    -------
    MappingResult
        On success, ``variables`` and ``provenance`` are both sorted by
        variable name.  On failure, both are empty and ``errors`` lists every
        failing variable, sorted by name.
    """
    data = pspec.model_dump(mode="json") if hasattr(pspec, "model_dump") else pspec

    variables: dict[str, int] = {}
    provenance: list[VariableProvenance] = []
    errors: list[MappingError] = []

    for d in TEMPLATE_CONTRACT:
        outcome = _evaluate(d, data)
        if isinstance(outcome, MappingError):
            errors.append(outcome)
            continue
        variables[d.name] = outcome
        provenance.append(VariableProvenance(
            var=d.name,
            value=outcome,
            unit=d.unit,
            source=d.source,
            pspec_path=d.pspec_path,
            notes=d.notes,
        ))

    if errors:
        errors.sort(key=lambda e: e.var)
        logger.debug("Variable mapping failed with %d errors", len(errors))
        return MappingResult(ok=False, errors=errors)

    provenance.sort(key=lambda p: p.var)
    return MappingResult(
        ok=True,
        variables={p.var: p.value for p in provenance},
        provenance=provenance,
    )
