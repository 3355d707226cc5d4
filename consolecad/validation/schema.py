"""Structural validation of a PSPEC against its JSON Schema contract."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator, FormatChecker
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("pspec.schema.json")


class SchemaError(BaseModel):
    """One structural violation: message plus JSON pointer to the field."""

    message: str
    pointer: str


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema, format_checker=FormatChecker())


def _to_pointer(path: Any) -> str:
    return "".join(
        "/" + str(part).replace("~", "~0").replace("/", "~1") for part in path
    )


def validate_schema(pspec: Any) -> list[SchemaError]:
    """Return every schema violation in *pspec* (empty list when it conforms).

    *pspec* may be a :class:`ParametricSpecification` or a plain mapping as
    read back from disk.
    """
    instance = pspec.model_dump(mode="json", exclude_none=True) if hasattr(pspec, "model_dump") else pspec
    errors = [
        SchemaError(message=err.message, pointer=_to_pointer(err.absolute_path))
        for err in _validator().iter_errors(instance)
    ]
    errors.sort(key=lambda e: (e.pointer, e.message))
    if errors:
        logger.debug("PSPEC failed schema validation with %d errors", len(errors))
    return errors
