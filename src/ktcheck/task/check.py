# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Orchestrate a single ktlint check execution.

The task validates configuration, decides whether the previous result is
still valid, runs the analysis engine when it is not, writes one report per
requested format and decides pass or fail. Up-to-date state and the build
cache are injected collaborators.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from ..cache.history import ExecutionHistory
from ..cache.keys import compute_cache_key
from ..cache.store import BuildCache
from ..config.models import RuleConfiguration
from ..core.models import (
    ArtifactSet,
    ReportArtifact,
    ReporterType,
    SourceInput,
    TaskOutcome,
    TaskResult,
    Violation,
    parse_reporters,
    sorted_reporters,
)
from ..engine.adapter import AnalysisEngine
from ..errors import ConfigError
from ..reporting.formats import serialize
from .writer import read_reports, report_path, write_reports

LOGGER = logging.getLogger(__name__)

DEFAULT_TASK_NAME: Final[str] = "ktlint-main"
SUMMARY_VIOLATION_LIMIT: Final[int] = 10


def summarize_violations(
    violations: Sequence[Violation],
    *,
    tool_name: str,
    limit: int = SUMMARY_VIOLATION_LIMIT,
) -> str:
    """Return the aggregated diagnostic reported for failing checks.

    Args:
        violations: Violations in canonical order.
        tool_name: Linter display name.
        limit: Maximum number of violations listed verbatim.

    Returns:
        str: Multi-line message naming representative violations.
    """

    lines = [f"{tool_name} found {len(violations)} violation(s):"]
    lines.extend(f"  {violation.describe()}" for violation in violations[:limit])
    if len(violations) > limit:
        lines.append(f"  … and {len(violations) - limit} more")
    return "\n".join(lines)


class CheckTask:
    """Run the linter over a source set and report in every requested format."""

    def __init__(
        self,
        *,
        engine: AnalysisEngine,
        reports_dir: Path,
        name: str = DEFAULT_TASK_NAME,
        build_cache: BuildCache | None = None,
        history: ExecutionHistory | None = None,
    ) -> None:
        """Initialise the task.

        Args:
            engine: Analysis engine adapter.
            reports_dir: Directory owned by this task for report files.
            name: Task identity; also the base name of every report file.
            build_cache: Optional shared cache of successful results.
            history: Local execution history; an in-memory history is used
                when omitted.
        """

        self.engine = engine
        self.reports_dir = reports_dir
        self.name = name
        self.build_cache = build_cache
        self.history = history if history is not None else ExecutionHistory()

    def report_path(self, reporter: ReporterType) -> Path:
        """Return the deterministic report location for ``reporter``."""

        return report_path(self.reports_dir, self.name, reporter)

    def compute_key(
        self,
        sources: Sequence[SourceInput],
        config: RuleConfiguration,
        requested_formats: Iterable[ReporterType],
    ) -> str:
        """Return the relocatable cache key for this task and its inputs."""

        return compute_cache_key(
            sources,
            config,
            requested_formats,
            task_name=self.name,
            analyzer=self.engine.fingerprint,
        )

    def execute(
        self,
        sources: Sequence[SourceInput],
        config: RuleConfiguration,
        requested_formats: Iterable[ReporterType | str] | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> TaskResult:
        """Execute the check.

        Configuration errors produce a ``FAILED`` result without writing any
        report. Violations produce a ``FAILED`` result after every requested
        report has been written. Reports for formats that are no longer
        requested are left in place.

        Args:
            sources: Files to analyse.
            config: Rule configuration.
            requested_formats: Formats to write; defaults to ``config.reporters``.
            cancel_event: Optional event used to abandon analysis.

        Returns:
            TaskResult: Outcome, violations and written artifacts.

        Raises:
            CheckIOError: If a source cannot be read or a report cannot be written.
            AnalysisError: If the analyzer fails.
            CheckCancelledError: If ``cancel_event`` is set during analysis.
        """

        try:
            reporters = sorted_reporters(
                config.reporters if requested_formats is None else parse_reporters(requested_formats),
            )
            self.engine.validate(config)
        except ConfigError as exc:
            LOGGER.warning("%s rejected its configuration: %s", self.name, exc)
            return TaskResult(outcome=TaskOutcome.FAILED, message=str(exc))

        key = self.compute_key(sources, config, reporters)
        expected_outputs = tuple(self.report_path(reporter) for reporter in reporters)

        if self.history.is_up_to_date(self.name, key, expected_outputs):
            LOGGER.info("%s is up to date", self.name)
            return TaskResult(
                outcome=TaskOutcome.UP_TO_DATE,
                artifacts=read_reports(self.reports_dir, self.name, reporters),
                cache_key=key,
            )

        restored = self._restore_from_cache(key, reporters, config)
        if restored is not None:
            return restored

        violations = self.engine.run(sources, config, cancel_event=cancel_event)
        reports = {
            reporter: serialize(reporter, violations, tool_version=config.linter_version) for reporter in reporters
        }
        artifacts = write_reports(self.reports_dir, self.name, reports)

        if violations and not config.ignore_failures:
            message = summarize_violations(violations, tool_name=self.engine.tool_name)
            LOGGER.info("%s failed with %d violation(s)", self.name, len(violations))
            return TaskResult(
                outcome=TaskOutcome.FAILED,
                violations=violations,
                artifacts=artifacts,
                message=message,
                cache_key=key,
            )

        if self.build_cache is not None:
            self.build_cache.put(key, ArtifactSet(violations=violations, reports=reports))
        self._record(key, artifacts)
        return TaskResult(
            outcome=TaskOutcome.SUCCESS,
            violations=violations,
            artifacts=artifacts,
            message=summarize_violations(violations, tool_name=self.engine.tool_name) if violations else None,
            cache_key=key,
        )

    def _restore_from_cache(
        self,
        key: str,
        reporters: tuple[ReporterType, ...],
        config: RuleConfiguration,
    ) -> TaskResult | None:
        """Restore every requested report from the build cache when possible."""

        if self.build_cache is None:
            return None
        cached = self.build_cache.get(key)
        if cached is None:
            return None
        missing = [reporter for reporter in reporters if reporter not in cached.reports]
        if missing:
            LOGGER.debug("cache entry %s lacks reports for %s", key, [reporter.value for reporter in missing])
            return None

        artifacts = write_reports(
            self.reports_dir,
            self.name,
            {reporter: cached.reports[reporter] for reporter in reporters},
        )
        self._record(key, artifacts)
        LOGGER.info("%s restored from the build cache", self.name)
        message = None
        if cached.violations and config.ignore_failures:
            message = summarize_violations(cached.violations, tool_name=self.engine.tool_name)
        return TaskResult(
            outcome=TaskOutcome.FROM_CACHE,
            violations=cached.violations,
            artifacts=artifacts,
            message=message,
            cache_key=key,
        )

    def _record(self, key: str, artifacts: tuple[ReportArtifact, ...]) -> None:
        self.history.record(self.name, key, {artifact.output_path: artifact.content for artifact in artifacts})


__all__ = ["DEFAULT_TASK_NAME", "CheckTask", "summarize_violations"]
