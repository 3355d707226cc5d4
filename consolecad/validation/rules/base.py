"""Abstract ManufacturabilityRule interface."""

from __future__ import annotations

import abc

from consolecad.models.pspec import ParametricSpecification


class ManufacturabilityIssue:
    """A single feasibility violation found by a rule."""

    def __init__(
        self,
        rule_name: str,
        message: str,
        component: str = "",
    ) -> None:
        self.rule_name = rule_name
        self.message = message
        self.component = component


class ManufacturabilityRule(abc.ABC):
    """Base class for all manufacturability rules."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short rule identifier."""

    @property
    @abc.abstractmethod
    def description(self) -> str:
        """Human-readable description."""

    @abc.abstractmethod
    def check(self, pspec: ParametricSpecification) -> list[ManufacturabilityIssue]:
        """Run this rule against a schema-valid PSPEC.

        Returns list of issues (empty if passing).
        """
