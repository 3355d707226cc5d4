from consolecad.validation.rules.base import ManufacturabilityIssue, ManufacturabilityRule
from consolecad.validation.rules.depth import DepthRules

__all__ = ["DepthRules", "ManufacturabilityIssue", "ManufacturabilityRule"]
