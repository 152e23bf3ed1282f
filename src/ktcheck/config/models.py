# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the ktlint check task."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.models import ReporterType, parse_reporters, sorted_reporters
from ..errors import ConfigError

TOOL_DISPLAY_NAME: Final[str] = "Ktlint"
MINIMUM_SUPPORTED_VERSION: Final[str] = "0.10.0"
DEFAULT_LINTER_VERSION: Final[str] = "0.29.0"
DEFAULT_REPORTERS: Final[frozenset[ReporterType]] = frozenset({ReporterType.PLAIN})


class RuleConfiguration(BaseModel):
    """Describe the linter release, rule selection and requested reporters.

    ``reporters`` accepts string identifiers (``"PLAIN"``, ``"checkstyle"``)
    and rejects unknown ones while the model is validated.
    """

    model_config = ConfigDict(frozen=True)

    linter_version: str = DEFAULT_LINTER_VERSION
    enabled_rules: tuple[str, ...] = ()
    disabled_rules: tuple[str, ...] = ()
    editorconfig_overrides: dict[str, str] = Field(default_factory=dict)
    android: bool = False
    experimental: bool = False
    reporters: frozenset[ReporterType] = DEFAULT_REPORTERS
    ignore_failures: bool = False
    output_to_console: bool = True

    @field_validator("linter_version", mode="before")
    @classmethod
    def _strip_version(cls, value: object) -> str:
        """Return the configured version string without surrounding whitespace."""

        return str(value).strip()

    @field_validator("enabled_rules", "disabled_rules", mode="before")
    @classmethod
    def _coerce_rules(cls, value: object) -> tuple[str, ...]:
        """Accept comma separated strings as well as sequences of rule ids.

        Args:
            value: Raw rule selection from configuration files or callers.

        Returns:
            tuple[str, ...]: De-duplicated, sorted rule identifiers.
        """

        if value is None:
            return ()
        items: Iterable[object] = value.split(",") if isinstance(value, str) else value  # type: ignore[assignment]
        return tuple(sorted({str(item).strip() for item in items if str(item).strip()}))

    @field_validator("editorconfig_overrides", mode="before")
    @classmethod
    def _coerce_overrides(cls, value: object) -> dict[str, str]:
        """Stringify override values so the normalised payload is stable."""

        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigError("editorconfig_overrides must be a table of key/value pairs")
        return {str(key): str(item).lower() if isinstance(item, bool) else str(item) for key, item in value.items()}

    @field_validator("reporters", mode="before")
    @classmethod
    def _parse_reporters(cls, value: object) -> frozenset[ReporterType]:
        """Parse reporter identifiers into :class:`ReporterType` members.

        Raises:
            UnknownReporterError: If an identifier is not supported.
        """

        if value is None:
            return DEFAULT_REPORTERS
        if isinstance(value, (str, ReporterType)):
            return parse_reporters([value])
        return parse_reporters(value)  # type: ignore[arg-type]

    def is_rule_enabled(self, rule_id: str) -> bool:
        """Return whether ``rule_id`` participates in analysis."""

        if rule_id in self.disabled_rules:
            return False
        return not self.enabled_rules or rule_id in self.enabled_rules

    def normalized_payload(self) -> dict[str, object]:
        """Return the full rule configuration in a canonical, JSON-friendly form.

        Reporter selection and console preferences are excluded; the cache
        key folds the requested formats in separately. ``ignore_failures``
        stays in because it decides the outcome of a run.
        """

        return {
            "linter_version": self.linter_version,
            "enabled_rules": list(self.enabled_rules),
            "disabled_rules": list(self.disabled_rules),
            "editorconfig_overrides": dict(sorted(self.editorconfig_overrides.items())),
            "android": self.android,
            "experimental": self.experimental,
            "ignore_failures": self.ignore_failures,
        }

    def reporter_names(self) -> list[str]:
        """Return the configured reporter identifiers in canonical order."""

        return [reporter.value for reporter in sorted_reporters(self.reporters)]


__all__ = [
    "DEFAULT_LINTER_VERSION",
    "DEFAULT_REPORTERS",
    "MINIMUM_SUPPORTED_VERSION",
    "TOOL_DISPLAY_NAME",
    "RuleConfiguration",
]
