# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Minimum-version gate for linter releases."""

from __future__ import annotations

import re
from typing import Final

from packaging.version import InvalidVersion, Version

from ..errors import ConfigError

_DOTTED_VERSION: Final[re.Pattern[str]] = re.compile(r"\d+(?:\.\d+)+")


def parse_linter_version(raw: str | None) -> Version | None:
    """Return the first dotted release number found in ``raw``.

    Args:
        raw: Version text such as ``"0.29.0"`` or ``"ktlint 0.29.0"``.

    Returns:
        Version | None: Parsed release, or ``None`` when ``raw`` holds none.
    """

    if not raw:
        return None
    match = _DOTTED_VERSION.search(raw)
    try:
        return Version(match.group(0) if match else raw.strip())
    except InvalidVersion:
        return None


class VersionFloor:
    """Admit linter releases at or above ``minimum``."""

    def __init__(self, minimum: str) -> None:
        parsed = parse_linter_version(minimum)
        if parsed is None:
            raise ConfigError(f"Invalid minimum version: {minimum!r}")
        self.minimum = minimum
        self._floor = parsed

    def admits(self, version: Version) -> bool:
        """Return whether ``version`` is not older than the floor."""

        return version >= self._floor


__all__ = ["VersionFloor", "parse_linter_version"]
