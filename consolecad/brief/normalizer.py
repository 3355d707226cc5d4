"""Brief Normalizer: untyped draft answers to a typed DIB revision.

Usage::

    from consolecad.brief import normalize_brief

    result = normalize_brief(draft, prior_revision_count=0, project_id="prj_demo01")
    if result.ok:
        dib = result.brief
    else:
        for err in result.errors:
            print(err.path, err.message)

Incomplete or invalid drafts are reported as data, never raised.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, Field

from consolecad.brief.pointer import MISSING, get_by_pointer, set_by_pointer
from consolecad.brief.questions import QUESTION_SET_V0_1, Question, QuestionSet, is_finite_number
from consolecad.clock import utc_now_iso
from consolecad.models.brief import DesignIntentBrief

logger = logging.getLogger(__name__)

DEPTH_PATH = "/overall/depth_mm"
BACK_CLEARANCE_PATH = "/constraints/back_clearance_mm"


class FieldError(BaseModel):
    """A single problem with one answer, keyed by its store path."""

    path: str
    message: str


class NormalizeResult(BaseModel):
    brief: DesignIntentBrief | None = None
    errors: list[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.brief is not None and not self.errors


# -- Per-kind checks ---------------------------------------------------------
# Each returns (coerced value, error message or None).


def _check_confirm(q: Question, value: Any) -> tuple[Any, str | None]:
    if value is not True:
        return None, "Must be confirmed."
    return True, None


def _check_boolean(q: Question, value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, bool):
        return None, "Must be true/false."
    return bool(value), None


def _check_enum(q: Question, value: Any) -> tuple[Any, str | None]:
    options = q.options or ()
    if not isinstance(value, str) or value not in options:
        return None, f"Must be one of: {', '.join(options)}"
    return str(value), None


def _check_integer(q: Question, value: Any) -> tuple[Any, str | None]:
    if not is_finite_number(value) or not float(value).is_integer():
        return None, "Must be an integer."
    return int(value), None


def _check_number(q: Question, value: Any) -> tuple[Any, str | None]:
    if not is_finite_number(value):
        return None, "Must be a number."
    return float(value), None


def _check_text(q: Question, value: Any) -> tuple[Any, str | None]:
    if not isinstance(value, str):
        return None, "Must be text."
    return str(value), None


_KIND_CHECKS: dict[str, Callable[[Question, Any], tuple[Any, str | None]]] = {
    "confirm": _check_confirm,
    "boolean": _check_boolean,
    "enum": _check_enum,
    "integer": _check_integer,
    "number": _check_number,
    "number_mm": _check_number,
    "text": _check_text,
}


def _format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _range_messages(q: Question, value: Any) -> list[str]:
    if not is_finite_number(value):
        return []
    messages: list[str] = []
    if q.min is not None and value < q.min:
        messages.append(f"Must be >= {_format_bound(q.min)}.")
    if q.max is not None and value > q.max:
        messages.append(f"Must be <= {_format_bound(q.max)}.")
    return messages


def validate_draft(
    draft: dict[str, Any],
    question_set: QuestionSet = QUESTION_SET_V0_1,
) -> tuple[dict[str, Any], list[FieldError]]:
    """Walk the question set once, validating and coercing every applicable answer.

    Returns the coerced answers (nested by store path) and every error found.
    """
    values: dict[str, Any] = {}
    errors: list[FieldError] = []

    for q in question_set.questions:
        if not q.applies(draft):
            if q.when_skipped is not None:
                set_by_pointer(values, q.store_path, q.when_skipped)
            continue

        raw = get_by_pointer(draft, q.store_path)
        if raw is MISSING or raw is None:
            if q.required:
                errors.append(FieldError(path=q.store_path, message="Required."))
            continue

        coerced, message = _KIND_CHECKS[q.kind](q, raw)
        problems = [message] if message else []
        problems.extend(_range_messages(q, raw))
        errors.extend(FieldError(path=q.store_path, message=m) for m in problems)
        if not problems:
            set_by_pointer(values, q.store_path, coerced)

    depth = get_by_pointer(draft, DEPTH_PATH)
    back_clearance = get_by_pointer(draft, BACK_CLEARANCE_PATH)
    if is_finite_number(depth) and is_finite_number(back_clearance) and back_clearance >= depth:
        errors.append(FieldError(path=BACK_CLEARANCE_PATH, message="Must be less than overall depth."))

    return values, errors


def normalize_brief(
    draft: dict[str, Any],
    prior_revision_count: int,
    *,
    project_id: str,
    now: str | None = None,
    question_set: QuestionSet = QUESTION_SET_V0_1,
) -> NormalizeResult:
    """Turn a draft into the next immutable DIB revision, or list why it cannot.

    Parameters
    ----------
    draft:
        Untyped answers keyed by the question store paths.
    prior_revision_count:
        Number of DIB revisions already confirmed for the project.
    project_id:
        Owning project.
    now:
        ISO timestamp used for both ``created_at`` and ``confirmed_at``.
    """
    values, errors = validate_draft(draft, question_set)
    if errors:
        logger.debug("Draft for %s has %d validation errors", project_id, len(errors))
        return NormalizeResult(errors=errors)

    stamp = now or utc_now_iso()
    brief = DesignIntentBrief.model_validate({
        **values,
        "dib_version": question_set.dib_version,
        "project_id": project_id,
        "revision": prior_revision_count + 1,
        "created_at": stamp,
        "confirmed_at": stamp,
    })
    return NormalizeResult(brief=brief)
