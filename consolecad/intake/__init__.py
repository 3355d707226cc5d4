"""Reference geometry intake."""

from consolecad.intake.crg import CrgIntakeError, crg_format_from_name, ingest_crg

__all__ = ["CrgIntakeError", "crg_format_from_name", "ingest_crg"]
