"""Global configuration: schema versions, paths, constants."""

from pathlib import Path

# Schema versions written into every persisted record
DIB_VERSION = "0.1.0"
PSPEC_VERSION = "0.1.0"
META_VERSION = "0.1.0"
QUESTION_SET_VERSION = "0.1.0"

# Bumped only on breaking changes to variable naming, rounding or units
ONSHAPE_TEMPLATE_CONTRACT_VERSION = "0.1.0"

ARCHETYPE_ID = "record_console"
ARCHETYPE_VERSION = "0.1"
SPEAKER_ENCLOSURE_TYPE = "sealed"
SPEAKER_COUNT = 2

# Minimum usable depth for a drawer that holds LPs edge-on
MIN_LP_DRAWER_DEPTH_MM = 330

# Default artifacts directory (relative to the working directory)
DEFAULT_ARTIFACTS_ROOT = Path("artifacts")

PROJECT_ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]{5,63}$"
PROJECT_ID_PREFIX = "prj_"
MAX_PROJECT_NAME_LENGTH = 120

# Sub-folder names inside each project folder
CRG_DIR = "crg"
DIB_DIR = "dib"
PSPEC_DIR = "pspec"
META_DIR = "meta"
REVISIONS_DIR = "revisions"
CAD_DIR = "cad"

REVISION_DIR_FORMAT = "rev-{:04d}"

# File names
DRAFT_FILENAME = "draft.json"
DIB_FILENAME = "dib.json"
PSPEC_FILENAME = "pspec.json"
PSPEC_SUMMARY_FILENAME = "pspec.summary.md"
RUN_META_FILENAME = "run.json"
VARIABLES_FILENAME = "onshape.variables.json"
PROVENANCE_FILENAME = "onshape.provenance.json"
CAD_RUN_FILENAME = "onshape.run.json"
