# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the ktcheck package."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from ..errors import SourceReadError, UnknownReporterError
from ..filesystem.paths import relative_posix
from .severity import Severity


class ReporterType(str, Enum):
    """Enumerate the report formats a check can produce."""

    PLAIN = "PLAIN"
    PLAIN_GROUP_BY_FILE = "PLAIN_GROUP_BY_FILE"
    CHECKSTYLE = "CHECKSTYLE"
    JSON = "JSON"
    SARIF = "SARIF"

    @property
    def extension(self) -> str:
        """Return the fixed file extension used for reports in this format."""

        return _REPORTER_EXTENSIONS[self]

    @classmethod
    def parse(cls, raw: str | ReporterType) -> ReporterType:
        """Return the reporter named by ``raw``.

        Args:
            raw: Reporter identifier such as ``"checkstyle"`` or a member.

        Returns:
            ReporterType: Matching enum member.

        Raises:
            UnknownReporterError: If ``raw`` does not name a known reporter.
        """

        if isinstance(raw, ReporterType):
            return raw
        token = str(raw).strip().upper().replace("-", "_")
        try:
            return cls(token)
        except ValueError as exc:
            raise UnknownReporterError(str(raw), known=tuple(member.value for member in cls)) from exc


_REPORTER_EXTENSIONS: Final[dict[ReporterType, str]] = {
    ReporterType.PLAIN: "txt",
    ReporterType.PLAIN_GROUP_BY_FILE: "group-by-file.txt",
    ReporterType.CHECKSTYLE: "xml",
    ReporterType.JSON: "json",
    ReporterType.SARIF: "sarif",
}


def parse_reporters(values: Iterable[str | ReporterType]) -> frozenset[ReporterType]:
    """Return the reporter set named by ``values``, rejecting unknown identifiers.

    Args:
        values: Reporter identifiers or members in any order.

    Returns:
        frozenset[ReporterType]: Parsed reporter set.
    """

    return frozenset(ReporterType.parse(value) for value in values)


def sorted_reporters(reporters: Iterable[ReporterType]) -> tuple[ReporterType, ...]:
    """Return ``reporters`` in their canonical (name-sorted) order."""

    return tuple(sorted(set(reporters), key=lambda reporter: reporter.value))


class Violation(BaseModel):
    """Record a single rule violation reported by the analyzer."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = Field(ge=1)
    column: int = Field(ge=1)
    rule_id: str
    message: str
    severity: Severity = Severity.ERROR

    def describe(self) -> str:
        """Return the human-readable ``file:line:column: message (rule)`` form."""

        return f"{self.file}:{self.line}:{self.column}: {self.message} ({self.rule_id})"

    def sort_key(self) -> tuple[str, int, int, str, str]:
        """Return the ordering key used to normalise merged results."""

        return (self.file, self.line, self.column, self.rule_id, self.message)


class SourceInput(BaseModel):
    """Identify a source file by its project-relative path and content hash.

    The absolute ``path`` is only used to read the file; cache keys rely on
    ``relative_path`` and ``content_hash`` so that relocated projects match.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    relative_path: str
    content_hash: str

    @classmethod
    def from_path(cls, path: Path, *, root: Path) -> SourceInput:
        """Hash ``path`` and describe it relative to ``root``.

        Args:
            path: Source file to describe; relative paths resolve against ``root``.
            root: Project root used to relativise the path.

        Returns:
            SourceInput: Immutable description of the file.

        Raises:
            SourceReadError: If the file cannot be read.
        """

        candidate = path if path.is_absolute() else root / path
        try:
            content = candidate.read_bytes()
        except OSError as exc:
            raise SourceReadError(f"Unable to read source file {candidate}: {exc}") from exc
        return cls(
            path=candidate,
            relative_path=relative_posix(candidate, base_dir=root),
            content_hash=hashlib.sha256(content).hexdigest(),
        )


class ReportArtifact(BaseModel):
    """Describe a report written for one requested format."""

    model_config = ConfigDict(frozen=True)

    format: ReporterType
    output_path: Path
    content: bytes


class ArtifactSet(BaseModel):
    """Relocatable bundle stored in the build cache for a successful check."""

    model_config = ConfigDict(frozen=True)

    violations: tuple[Violation, ...] = ()
    reports: dict[ReporterType, bytes] = Field(default_factory=dict)


class TaskOutcome(str, Enum):
    """Enumerate the outcomes a check execution can report."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    UP_TO_DATE = "UP_TO_DATE"
    FROM_CACHE = "FROM_CACHE"


class TaskResult(BaseModel):
    """Capture the result of a single check execution."""

    model_config = ConfigDict(frozen=True)

    outcome: TaskOutcome
    violations: tuple[Violation, ...] = ()
    artifacts: tuple[ReportArtifact, ...] = ()
    message: str | None = None
    cache_key: str | None = None

    @property
    def failed(self) -> bool:
        """Return whether the execution failed."""

        return self.outcome is TaskOutcome.FAILED


__all__ = [
    "ArtifactSet",
    "ReportArtifact",
    "ReporterType",
    "SourceInput",
    "TaskOutcome",
    "TaskResult",
    "Violation",
    "parse_reporters",
    "sorted_reporters",
]
