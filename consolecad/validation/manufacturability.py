"""Manufacturability validator: derived-quantity feasibility checks.

Usage::

    from consolecad.validation import validate_manufacturability

    result = validate_manufacturability(pspec)
    if not result.ok:
        print("\n".join(result.errors))

Every registered rule runs; nothing short-circuits, so one pass reports every
violation.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from consolecad.models.pspec import ParametricSpecification
from consolecad.validation.rules.base import ManufacturabilityIssue, ManufacturabilityRule
from consolecad.validation.rules.depth import DepthRules

logger = logging.getLogger(__name__)


class ManufacturabilityResult(BaseModel):
    ok: bool = True
    errors: list[str] = Field(default_factory=list)


class ManufacturabilityValidator:
    """Feasibility engine with a pluggable rule registry.

    Loads the default rules on init.  Additional rules can be registered via
    :meth:`add_rule`.
    """

    def __init__(self) -> None:
        self.rules: list[ManufacturabilityRule] = []
        self._load_default_rules()

    def _load_default_rules(self) -> None:
        self.rules.extend(DepthRules.all_rules())

    def add_rule(self, rule: ManufacturabilityRule) -> None:
        """Register an additional rule."""
        self.rules.append(rule)

    def issues(self, pspec: ParametricSpecification) -> list[ManufacturabilityIssue]:
        found: list[ManufacturabilityIssue] = []
        for rule in self.rules:
            found.extend(rule.check(pspec))
        return found

    def validate(self, pspec: ParametricSpecification) -> ManufacturabilityResult:
        found = self.issues(pspec)
        if found:
            logger.debug(
                "PSPEC revision %d failed %d manufacturability checks",
                pspec.revision, len(found),
            )
            return ManufacturabilityResult(ok=False, errors=[i.message for i in found])
        return ManufacturabilityResult()


def validate_manufacturability(pspec: ParametricSpecification) -> ManufacturabilityResult:
    """Run the default manufacturability rules against *pspec*."""
    return ManufacturabilityValidator().validate(pspec)
