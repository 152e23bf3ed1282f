# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Write report artifacts to their deterministic locations."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from ..core.models import ReportArtifact, ReporterType, sorted_reporters
from ..errors import CheckIOError, ReportWriteError
from ..filesystem.atomic import atomic_write_bytes
from ..reporting.formats import report_filename


def report_path(reports_dir: Path, task_name: str, reporter: ReporterType) -> Path:
    """Return ``<reports_dir>/<task_name>.<extension>`` for ``reporter``."""

    return reports_dir / report_filename(task_name, reporter)


def write_reports(
    reports_dir: Path,
    task_name: str,
    reports: Mapping[ReporterType, bytes],
) -> tuple[ReportArtifact, ...]:
    """Atomically write one report per entry of ``reports``.

    Writing stops at the first failure; reports already in place from an
    earlier run are left untouched by the failed write.

    Args:
        reports_dir: Directory owned by the task.
        task_name: Task identity used as the report base name.
        reports: Serialized content keyed by format.

    Returns:
        tuple[ReportArtifact, ...]: Written artifacts in canonical format order.

    Raises:
        ReportWriteError: If a report cannot be written.
    """

    artifacts: list[ReportArtifact] = []
    for reporter in sorted_reporters(reports):
        destination = report_path(reports_dir, task_name, reporter)
        content = reports[reporter]
        try:
            atomic_write_bytes(destination, content)
        except OSError as exc:
            raise ReportWriteError(f"Unable to write {reporter.value} report to {destination}: {exc}") from exc
        artifacts.append(ReportArtifact(format=reporter, output_path=destination, content=content))
    return tuple(artifacts)


def read_reports(
    reports_dir: Path,
    task_name: str,
    reporters: tuple[ReporterType, ...],
) -> tuple[ReportArtifact, ...]:
    """Return artifacts for reports already present on disk.

    Raises:
        CheckIOError: If an expected report cannot be read back.
    """

    artifacts: list[ReportArtifact] = []
    for reporter in reporters:
        destination = report_path(reports_dir, task_name, reporter)
        try:
            content = destination.read_bytes()
        except OSError as exc:
            raise CheckIOError(f"Unable to read {reporter.value} report at {destination}: {exc}") from exc
        artifacts.append(ReportArtifact(format=reporter, output_path=destination, content=content))
    return tuple(artifacts)


__all__ = ["read_reports", "report_path", "write_reports"]
