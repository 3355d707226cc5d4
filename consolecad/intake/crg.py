"""Concept Reference Geometry intake.

The uploaded mesh is hashed and described, never parsed.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from consolecad.clock import utc_now_iso
from consolecad.models.geometry import CrgFormat, GeometryMetadata
from consolecad.storage.fs import sanitize_file_name
from consolecad.storage.hasher import Hasher

logger = logging.getLogger(__name__)


class CrgIntakeError(ValueError):
    """Raised for an unusable upload (bad name, unsupported format, empty)."""


def crg_format_from_name(file_name: str) -> CrgFormat:
    ext = PurePosixPath(file_name).suffix.lower().lstrip(".")
    try:
        return CrgFormat(ext)
    except ValueError:
        raise CrgIntakeError("Unsupported file format. Use GLB, GLTF, FBX, or OBJ.") from None


def ingest_crg(file_name: str, data: bytes, now: str | None = None) -> GeometryMetadata:
    """Describe an uploaded reference mesh.

    Parameters
    ----------
    file_name:
        Name as supplied by the client; directories are stripped.
    data:
        Raw file contents.
    now:
        Upload timestamp; defaults to the current UTC time.
    """
    original = sanitize_file_name(file_name)
    if not original:
        raise CrgIntakeError("Invalid filename.")
    fmt = crg_format_from_name(original)
    if len(data) < 1:
        raise CrgIntakeError("Empty file.")

    meta = GeometryMetadata(
        original_filename=original,
        format=fmt,
        bytes=len(data),
        sha256=Hasher.hash_bytes(data),
        uploaded_at=now or utc_now_iso(),
    )
    logger.debug("CRG %s (%s, %d bytes)", original, fmt.value, meta.bytes)
    return meta
