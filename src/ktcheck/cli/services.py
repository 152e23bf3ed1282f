# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers wiring CLI options to the check task."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..cache.history import ExecutionHistory
from ..cache.store import DirectoryBuildCache
from ..config.loader import EngineKind, ProjectSettings, load_project_settings
from ..core.models import TaskOutcome, TaskResult, parse_reporters
from ..engine.adapter import AnalysisEngine
from ..engine.analyzers import Analyzer, KtlintCliAnalyzer, TextRuleAnalyzer
from ..errors import ConfigError
from ..task.check import CheckTask
from .shared import CLIError, CLILogger

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130


@dataclass(frozen=True, slots=True)
class CheckOverrides:
    """Command-line values overriding the project configuration."""

    reporters: tuple[str, ...] = ()
    reports_dir: Path | None = None
    task_name: str | None = None
    cache_dir: Path | None = None
    no_cache: bool = False
    state_dir: Path | None = None
    linter_version: str | None = None
    engine: EngineKind | None = None
    ktlint_executable: str | None = None
    jobs: int | None = None
    ignore_failures: bool = False


def load_settings(root: Path, overrides: CheckOverrides) -> ProjectSettings:
    """Return project settings for ``root`` with ``overrides`` applied.

    Raises:
        CLIError: If the configuration is invalid.
    """

    try:
        settings = load_project_settings(root)
        rule_updates: dict[str, object] = {}
        if overrides.reporters:
            rule_updates["reporters"] = parse_reporters(overrides.reporters)
        if overrides.linter_version is not None:
            rule_updates["linter_version"] = overrides.linter_version.strip()
        if overrides.ignore_failures:
            rule_updates["ignore_failures"] = True
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_FAILED) from exc

    updates: dict[str, object] = {"rules": settings.rules.model_copy(update=rule_updates)}
    if overrides.reports_dir is not None:
        updates["reports_dir"] = overrides.reports_dir
    if overrides.task_name is not None:
        updates["task_name"] = overrides.task_name
    if overrides.cache_dir is not None:
        updates["cache_dir"] = overrides.cache_dir
    if overrides.no_cache:
        updates["cache_dir"] = None
    if overrides.state_dir is not None:
        updates["state_dir"] = overrides.state_dir
    if overrides.engine is not None:
        updates["engine"] = overrides.engine
    if overrides.ktlint_executable is not None:
        updates["ktlint_executable"] = overrides.ktlint_executable
    if overrides.jobs is not None:
        updates["jobs"] = overrides.jobs
    return settings.model_copy(update=updates).resolve(root)


def build_analyzer(settings: ProjectSettings) -> Analyzer:
    """Return the analyzer selected by ``settings``."""

    if settings.engine is EngineKind.KTLINT:
        return KtlintCliAnalyzer(settings.ktlint_executable)
    return TextRuleAnalyzer()


def build_task(settings: ProjectSettings) -> CheckTask:
    """Return a check task wired to the stores named by ``settings``.

    Raises:
        CLIError: If the engine cannot be configured.
    """

    try:
        engine = AnalysisEngine(build_analyzer(settings), jobs=settings.jobs)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_FAILED) from exc
    build_cache = DirectoryBuildCache(settings.cache_dir) if settings.cache_dir is not None else None
    return CheckTask(
        engine=engine,
        reports_dir=settings.reports_dir,
        name=settings.task_name,
        build_cache=build_cache,
        history=ExecutionHistory(settings.state_dir),
    )


def render_result(result: TaskResult, *, settings: ProjectSettings, logger: CLILogger) -> int:
    """Print ``result`` and return the process exit code."""

    task = settings.task_name
    if result.failed:
        if result.message:
            if settings.rules.output_to_console or not result.violations:
                logger.echo(result.message)
        logger.fail(f"{task} FAILED")
        return EXIT_FAILED
    if result.message and settings.rules.output_to_console:
        logger.warn(result.message)
    for artifact in result.artifacts:
        logger.info(f"{artifact.format.value} report: {artifact.output_path}")
    labels = {
        TaskOutcome.SUCCESS: "passed",
        TaskOutcome.UP_TO_DATE: "is UP-TO-DATE",
        TaskOutcome.FROM_CACHE: "restored FROM-CACHE",
    }
    logger.ok(f"{task} {labels[result.outcome]}")
    return EXIT_OK


__all__ = [
    "EXIT_CANCELLED",
    "EXIT_ERROR",
    "EXIT_FAILED",
    "EXIT_OK",
    "CheckOverrides",
    "build_analyzer",
    "build_task",
    "load_settings",
    "render_result",
]
