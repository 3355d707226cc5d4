"""ConfigManager: environment profiles, layered settings and logging setup.

Layers, lowest precedence first::

    defaults
    profile          (log level for CONSOLECAD_ENV)
    .consolecad/config.json
    .env
    process environment

Only the keys in ``CONFIG_KEYS`` are read; anything else is ignored.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from consolecad.cad.runs import TemplateRef
from consolecad.config import DEFAULT_ARTIFACTS_ROOT

logger = logging.getLogger(__name__)

CONFIG_KEYS: dict[str, tuple[str, str]] = {
    "CONSOLECAD_ENV": ("development", "Environment profile: development, testing or production"),
    "CONSOLECAD_ARTIFACTS_ROOT": (
        str(DEFAULT_ARTIFACTS_ROOT),
        "Directory holding one folder per project (relative to the project path)",
    ),
    "CONSOLECAD_LOG_LEVEL": ("INFO", "Level for the consolecad loggers"),
    "ONSHAPE_TEMPLATE_DID": ("", "Onshape template document id"),
    "ONSHAPE_TEMPLATE_WID": ("", "Onshape template workspace id"),
    "ONSHAPE_TEMPLATE_EID": ("", "Onshape template element id"),
}

PROFILE_LOG_LEVELS: dict[str, str] = {
    "development": "DEBUG",
    "testing": "DEBUG",
    "production": "WARNING",
}


def _known(values: dict[str, Any], source: Path | str) -> dict[str, str]:
    unknown = sorted(set(values) - set(CONFIG_KEYS))
    if unknown:
        logger.debug("Ignoring unknown config keys from %s: %s", source, ", ".join(unknown))
    return {k: str(v) for k, v in values.items() if k in CONFIG_KEYS}


def _json_layer(root: Path) -> dict[str, str]:
    path = root / ".consolecad" / "config.json"
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Could not read %s", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return _known(data, path)


def _dotenv_layer(root: Path) -> dict[str, str]:
    path = root / ".env"
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip()
    return _known(values, path)


def _environ_layer() -> dict[str, str]:
    return {key: os.environ[key] for key in CONFIG_KEYS if key in os.environ}


class ConfigManager:
    """Manage console-cad configuration across environments."""

    def generate_env_template(self, project_path: str | Path) -> Path:
        """Write ``.env.example`` listing every key with its default.

        Returns the path to the generated file.
        """
        env_path = Path(project_path) / ".env.example"
        lines = [
            "# console-cad configuration",
            "# Copy to .env; the process environment overrides this file.",
            f"# Profiles: {', '.join(PROFILE_LOG_LEVELS)}",
        ]
        for key, (default, description) in CONFIG_KEYS.items():
            lines += ["", f"# {description}", f"{key}={default}"]
        env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return env_path

    def load_config(self, project_path: str | Path) -> dict[str, str]:
        """Merge every layer for *project_path* into a flat dict of settings.

        The profile is chosen by the highest layer that sets
        ``CONSOLECAD_ENV``; unknown profiles contribute nothing.
        """
        root = Path(project_path)
        overrides = [_json_layer(root), _dotenv_layer(root), _environ_layer()]

        config = {key: default for key, (default, _) in CONFIG_KEYS.items()}
        for layer in overrides:
            config["CONSOLECAD_ENV"] = layer.get("CONSOLECAD_ENV", config["CONSOLECAD_ENV"])

        profile_level = PROFILE_LOG_LEVELS.get(config["CONSOLECAD_ENV"])
        if profile_level is None:
            logger.warning("Unknown environment profile %r", config["CONSOLECAD_ENV"])
        else:
            config["CONSOLECAD_LOG_LEVEL"] = profile_level

        for layer in overrides:
            config.update(layer)
        return config

    @staticmethod
    def artifacts_root(config: dict[str, str], project_path: str | Path = ".") -> Path:
        """Resolve the artifacts root; relative paths are taken from *project_path*."""
        root = Path(config.get("CONSOLECAD_ARTIFACTS_ROOT") or DEFAULT_ARTIFACTS_ROOT)
        return root if root.is_absolute() else Path(project_path) / root

    @staticmethod
    def template_ref(config: dict[str, str]) -> TemplateRef:
        return TemplateRef(
            did=config.get("ONSHAPE_TEMPLATE_DID", "").strip(),
            wid=config.get("ONSHAPE_TEMPLATE_WID", "").strip(),
            eid=config.get("ONSHAPE_TEMPLATE_EID", "").strip(),
        )


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Apply *level* to the ``consolecad`` logger hierarchy."""
    pkg_logger = logging.getLogger("consolecad")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved
    pkg_logger.setLevel(level)
    return pkg_logger
