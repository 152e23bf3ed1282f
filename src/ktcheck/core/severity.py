# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels attached to reported violations."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_SEVERITY_TO_SARIF_LEVEL: Final[dict[Severity, str]] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}


def severity_to_sarif(severity: Severity) -> str:
    """Map :class:`Severity` to a SARIF reporting level.

    Args:
        severity: Severity value to translate.

    Returns:
        str: SARIF level string compatible with SARIF output.
    """
    return _SEVERITY_TO_SARIF_LEVEL.get(severity, "warning")


def severity_to_checkstyle(severity: Severity) -> str:
    """Map :class:`Severity` to the ``severity`` attribute used by checkstyle XML."""

    return severity.value


def parse_severity(raw: str | None, default: Severity = Severity.ERROR) -> Severity:
    """Return the severity named by ``raw``, falling back to ``default``.

    Args:
        raw: Severity label emitted by an analyzer, case insensitive.
        default: Severity returned when ``raw`` is empty or unrecognised.

    Returns:
        Severity: Parsed severity value.
    """
    if not raw:
        return default
    try:
        return Severity(raw.strip().lower())
    except ValueError:
        return default


__all__ = ["Severity", "parse_severity", "severity_to_checkstyle", "severity_to_sarif"]
