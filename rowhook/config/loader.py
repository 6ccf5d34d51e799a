"""Locate and read rowhook.yaml."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

CONFIG_ENV_VAR = "ROWHOOK_CONFIG"
DEFAULT_FILENAME = "rowhook.yaml"

# Sections whose YAML type is checked before pydantic sees them, so the error
# names the file instead of a model path.
_SECTION_TYPES: dict[str, type] = {
    "mysql": dict,
    "stream": dict,
    "logging": dict,
    "triggers": list,
}


class ConfigLoadError(ValueError):
    """Raised when configuration YAML cannot be read or has the wrong shape."""


def resolve_config_path(cli_path: str | None = None) -> Path:
    """Pick the config file: ``ROWHOOK_CONFIG``, then *cli_path*, then ``./rowhook.yaml``."""
    for candidate in (os.environ.get(CONFIG_ENV_VAR, ""), cli_path or ""):
        if candidate.strip():
            return Path(candidate.strip()).expanduser()
    return Path.cwd() / DEFAULT_FILENAME


def load_yaml(path: str | Path | None = None) -> dict[str, Any]:
    """Return the mapping stored at *path*; a missing or blank file is ``{}``."""
    target = Path(path).expanduser() if path is not None else resolve_config_path()
    if not target.is_file():
        return {}
    text = target.read_text(encoding="utf-8")
    if not text.strip():
        return {}

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        where = f"{target}:{mark.line + 1}:{mark.column + 1}" if mark is not None else str(target)
        raise ConfigLoadError(f"Invalid YAML at {where}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config root must be a mapping: {target}")
    for section, expected in _SECTION_TYPES.items():
        value = data.get(section)
        if value is not None and not isinstance(value, expected):
            raise ConfigLoadError(
                f"Section '{section}' in {target} must be a {expected.__name__}, got {type(value).__name__}"
            )
    return data
