# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Load project settings from ``ktcheck.toml`` or ``[tool.ktcheck]`` in ``pyproject.toml``."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import ConfigError
from ..filesystem.paths import DEFAULT_SOURCE_PATTERNS
from .models import RuleConfiguration

KTCHECK_TOML: Final[str] = "ktcheck.toml"
PYPROJECT_TOML: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "ktcheck"
RULES_KEY: Final[str] = "rules"


class EngineKind(str, Enum):
    """Enumerate the analyzer implementations selectable from configuration."""

    TEXT = "text"
    KTLINT = "ktlint"


class ProjectSettings(BaseModel):
    """Settings surrounding the rule configuration for one project."""

    model_config = ConfigDict(frozen=True)

    rules: RuleConfiguration = Field(default_factory=RuleConfiguration)
    task_name: str = "ktlint-main"
    reports_dir: Path = Path("build/reports/ktlint")
    cache_dir: Path | None = None
    state_dir: Path = Path("build/ktcheck")
    patterns: tuple[str, ...] = DEFAULT_SOURCE_PATTERNS
    excludes: tuple[str, ...] = ()
    engine: EngineKind = EngineKind.TEXT
    ktlint_executable: str = "ktlint"
    jobs: int | None = Field(default=None, ge=1)

    def resolve(self, root: Path) -> ProjectSettings:
        """Return a copy whose relative directories are anchored at ``root``."""

        updates: dict[str, Path] = {
            "reports_dir": _anchor(self.reports_dir, root),
            "state_dir": _anchor(self.state_dir, root),
        }
        if self.cache_dir is not None:
            updates["cache_dir"] = _anchor(self.cache_dir, root)
        return self.model_copy(update=updates)


def _anchor(path: Path, root: Path) -> Path:
    expanded = path.expanduser()
    return expanded if expanded.is_absolute() else root / expanded


def _read_toml(path: Path) -> dict[str, Any]:
    """Return the parsed TOML document at ``path``.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration at {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def find_settings_document(root: Path) -> tuple[Path, Mapping[str, Any]] | None:
    """Return the first configuration table found under ``root``.

    ``ktcheck.toml`` wins over ``pyproject.toml``; a ``pyproject.toml`` without
    a ``[tool.ktcheck]`` table is ignored.
    """

    dedicated = root / KTCHECK_TOML
    if dedicated.is_file():
        return dedicated, _read_toml(dedicated)
    pyproject = root / PYPROJECT_TOML
    if pyproject.is_file():
        tool_section = _read_toml(pyproject).get(PYPROJECT_TOOL_KEY)
        if isinstance(tool_section, Mapping):
            section = tool_section.get(PYPROJECT_SECTION_KEY)
            if isinstance(section, Mapping):
                return pyproject, section
    return None


def settings_from_mapping(data: Mapping[str, Any], *, source: str = "<mapping>") -> ProjectSettings:
    """Validate ``data`` into :class:`ProjectSettings`.

    Rule keys may live in a nested ``[rules]`` table or at the top level.

    Raises:
        ConfigError: If the data does not describe valid settings.
    """

    payload = {str(key).replace("-", "_"): value for key, value in data.items()}
    rule_fields = set(RuleConfiguration.model_fields)
    rules = dict(payload.pop(RULES_KEY, None) or {})
    for field_name in list(payload):
        if field_name in rule_fields:
            rules[field_name] = payload.pop(field_name)
    rules = {str(key).replace("-", "_"): value for key, value in rules.items()}
    try:
        return ProjectSettings.model_validate({**payload, RULES_KEY: RuleConfiguration.model_validate(rules)})
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {source}: {exc}") from exc


def load_project_settings(root: Path) -> ProjectSettings:
    """Load and resolve project settings for ``root``.

    Args:
        root: Project root directory.

    Returns:
        ProjectSettings: Settings with directories anchored at ``root``;
        defaults when no configuration file exists.

    Raises:
        ConfigError: If a configuration file exists but is invalid.
    """

    found = find_settings_document(root)
    if found is None:
        return ProjectSettings().resolve(root)
    path, data = found
    return settings_from_mapping(data, source=str(path)).resolve(root)


__all__ = [
    "EngineKind",
    "ProjectSettings",
    "find_settings_document",
    "load_project_settings",
    "settings_from_mapping",
]
