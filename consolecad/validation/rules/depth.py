"""Depth-wise feasibility rules.

Everything here works on unrounded PSPEC values.  Available depth is
``overall.depth_mm - constraints.back_clearance_mm``.
"""

from __future__ import annotations

from consolecad.config import MIN_LP_DRAWER_DEPTH_MM
from consolecad.models.pspec import ParametricSpecification
from consolecad.units import format_mm
from consolecad.validation.rules.base import ManufacturabilityIssue, ManufacturabilityRule

_COMPONENT_LABELS = {
    "speakers": ("Speakers", "exceed"),
    "amplifier": ("Amplifier", "exceeds"),
    "turntable": ("Turntable", "exceeds"),
}


class AvailableDepthPositive(ManufacturabilityRule):
    """Cabinet depth must leave room after the rear clearance."""

    @property
    def name(self) -> str:
        return "depth.available_positive"

    @property
    def description(self) -> str:
        return "Verify overall depth exceeds the reserved back clearance."

    def check(self, pspec: ParametricSpecification) -> list[ManufacturabilityIssue]:
        if pspec.available_depth_mm > 0:
            return []
        return [ManufacturabilityIssue(
            rule_name=self.name,
            message="overall.depth_mm must exceed constraints.back_clearance_mm.",
        )]


class ComponentDepthEnvelope(ManufacturabilityRule):
    """Each black-box component plus its front/rear clearance must fit the available depth."""

    @property
    def name(self) -> str:
        return "depth.component_envelope"

    @property
    def description(self) -> str:
        return "Verify component depth plus front and rear clearance fits the available depth."

    def check(self, pspec: ParametricSpecification) -> list[ManufacturabilityIssue]:
        issues: list[ManufacturabilityIssue] = []
        available = pspec.available_depth_mm
        if available <= 0:
            return issues

        for kind, component in pspec.components.black_boxes():
            clr = component.clearance_mm
            envelope = component.external_mm.depth_mm + clr.front_mm + clr.rear_mm
            if envelope > available:
                label, verb = _COMPONENT_LABELS[kind]
                issues.append(ManufacturabilityIssue(
                    rule_name=self.name,
                    message=(
                        f"{label} {verb} available depth (overall.depth_mm - back_clearance_mm) "
                        f"when clearances are applied ({format_mm(envelope)}mm > "
                        f"{format_mm(available)}mm)."
                    ),
                    component=kind,
                ))
        return issues


class LpDrawerDepth(ManufacturabilityRule):
    """Record drawers need a minimum usable depth."""

    @property
    def name(self) -> str:
        return "depth.lp_drawer"

    @property
    def description(self) -> str:
        return f"Verify available depth is at least {MIN_LP_DRAWER_DEPTH_MM}mm when drawers are requested."

    def check(self, pspec: ParametricSpecification) -> list[ManufacturabilityIssue]:
        if pspec.components.drawers.count <= 0:
            return []
        available = pspec.available_depth_mm
        if available >= MIN_LP_DRAWER_DEPTH_MM:
            return []
        return [ManufacturabilityIssue(
            rule_name=self.name,
            message=(
                f"Drawers requested, but available depth ({format_mm(available)}mm) is less than "
                f"minimum LP drawer depth ({MIN_LP_DRAWER_DEPTH_MM}mm)."
            ),
            component="drawers",
        )]


class DepthRules:
    """Collection of all depth feasibility rules."""

    @staticmethod
    def all_rules() -> list[ManufacturabilityRule]:
        return [
            AvailableDepthPositive(),
            ComponentDepthEnvelope(),
            LpDrawerDepth(),
        ]
