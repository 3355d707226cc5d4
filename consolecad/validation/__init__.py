"""Specification Validator: schema conformance and manufacturability."""

from consolecad.validation.manufacturability import (
    ManufacturabilityResult,
    ManufacturabilityValidator,
    validate_manufacturability,
)
from consolecad.validation.schema import SchemaError, validate_schema

__all__ = [
    "ManufacturabilityResult",
    "ManufacturabilityValidator",
    "SchemaError",
    "validate_manufacturability",
    "validate_schema",
]
