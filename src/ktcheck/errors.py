# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the check task and its collaborators."""

from __future__ import annotations


class KtcheckError(RuntimeError):
    """Base class for errors raised by the check task core."""


class ConfigError(KtcheckError):
    """Raised when configuration input is invalid."""


class UnsupportedVersionError(ConfigError):
    """Raised when the configured linter release is older than the supported floor."""

    def __init__(self, *, tool: str, minimum: str, detected: str) -> None:
        """Initialise the error with the tool name, the floor and the detected version.

        Args:
            tool: Display name of the linter, e.g. ``"Ktlint"``.
            minimum: Lowest supported version.
            detected: Version requested by the configuration.
        """

        super().__init__(
            f"{tool} versions less than {minimum} are not supported. Detected {tool} version: {detected}.",
        )
        self.tool = tool
        self.minimum = minimum
        self.detected = detected


class UnknownReporterError(ConfigError):
    """Raised when a requested report format identifier is not recognised."""

    def __init__(self, name: str, *, known: tuple[str, ...]) -> None:
        super().__init__(f"Unknown reporter '{name}'. Supported reporters: {', '.join(known)}")
        self.name = name


class AnalysisError(KtcheckError):
    """Raised when the external analyzer fails to produce a usable result."""


class CheckIOError(KtcheckError):
    """Raised when reading sources or writing reports fails."""


class SourceReadError(CheckIOError):
    """Raised when a source file cannot be read."""


class ReportWriteError(CheckIOError):
    """Raised when a report artifact cannot be written."""


class CheckCancelledError(KtcheckError):
    """Raised when a check is cancelled before every file was analyzed."""


__all__ = [
    "AnalysisError",
    "CheckCancelledError",
    "CheckIOError",
    "ConfigError",
    "KtcheckError",
    "ReportWriteError",
    "SourceReadError",
    "UnknownReporterError",
    "UnsupportedVersionError",
]
