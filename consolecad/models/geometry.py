"""Concept Reference Geometry (CRG) metadata.

Only provenance of the uploaded mesh is ever recorded.  The payload itself is
non-authoritative and never contributes a dimension.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from consolecad.models.common import RecordModel


class CrgFormat(str, Enum):
    """Accepted reference-mesh container formats."""

    GLB = "glb"
    GLTF = "gltf"
    FBX = "fbx"
    OBJ = "obj"


class GeometryMetadata(RecordModel):
    original_filename: str
    format: CrgFormat
    bytes: int = Field(ge=1)
    sha256: str
    uploaded_at: str
