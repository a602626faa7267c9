"""Layered YAML settings for the loader.

Scope priority (most specific wins):
1. project (.mrequire/settings.yaml)
2. global (~/.mrequire/settings.yaml)

Both files are optional. Malformed files are skipped with a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from .config import DEFAULT_EXTENSIONS
from .config import DEFAULT_OVERLAYS
from .config import DESCRIPTOR_NAME

logger = logging.getLogger(__name__)


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path

    @classmethod
    def default(cls, cwd: Path | None = None) -> SettingsPaths:
        """Create default paths for the standard layout."""
        cwd = cwd or Path.cwd()
        return cls(
            global_settings=Path.home() / ".mrequire" / "settings.yaml",
            project_settings=cwd / ".mrequire" / "settings.yaml",
        )


class RequireSettings(BaseModel):
    """Defaults applied to every package the registry loads."""

    overlays: tuple[str, ...] = DEFAULT_OVERLAYS
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    descriptor: str = DESCRIPTOR_NAME
    scope: dict[str, Any] = Field(default_factory=dict)


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge ``overlay`` into ``base``; nested dicts merge, everything else is replaced."""
    result = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Skipping unreadable settings file {path}: {e}")
        return {}
    if not isinstance(content, dict):
        logger.warning(f"Skipping settings file {path}: expected a mapping, got {type(content).__name__}")
        return {}
    return content


def load_settings(paths: SettingsPaths | None = None, **overrides: Any) -> RequireSettings:
    """Load and merge settings from all scopes, then apply ``overrides``.

    Overrides whose value is None are ignored so CLI options can be passed
    straight through.
    """
    paths = paths or SettingsPaths.default()
    merged: dict[str, Any] = {}
    for path in (paths.global_settings, paths.project_settings):
        merged = deep_merge(merged, _read_yaml(path))
    merged.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return RequireSettings.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid settings, using defaults: {e}")
        return RequireSettings(**{k: v for k, v in overrides.items() if v is not None})
