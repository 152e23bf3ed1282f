# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point for the ktlint check task."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from ..config.loader import EngineKind
from ..core.models import ReporterType
from ..core.sources import collect_sources
from ..errors import AnalysisError, CheckCancelledError, CheckIOError
from .services import (
    EXIT_CANCELLED,
    EXIT_ERROR,
    CheckOverrides,
    build_task,
    load_settings,
    render_result,
)
from .shared import CLIError, build_cli_logger

app = typer.Typer(
    help="Run ktlint style checks with incremental, cache-aware reporting.",
    no_args_is_help=True,
    add_completion=False,
)

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", help="Project root containing sources and configuration."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji in output."),
]


@app.command("check")
def check(
    root: ROOT_OPTION = Path("."),
    paths: list[Path] | None = typer.Argument(
        None,
        metavar="[PATHS...]",
        help="Files or directories to check; defaults to the project root.",
    ),
    reporter: list[str] | None = typer.Option(
        None,
        "--reporter",
        "-r",
        help="Report format to write (PLAIN, PLAIN_GROUP_BY_FILE, CHECKSTYLE, JSON, SARIF). Repeatable.",
    ),
    reports_dir: Path | None = typer.Option(None, "--reports-dir", help="Directory receiving report files."),
    task_name: str | None = typer.Option(None, "--task-name", help="Task identity and report base name."),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Shared build cache directory."),
    no_cache: bool = typer.Option(False, "--no-cache", help="Disable the build cache.", is_flag=True),
    state_dir: Path | None = typer.Option(None, "--state-dir", help="Directory holding up-to-date state."),
    linter_version: str | None = typer.Option(None, "--linter-version", help="ktlint version to require."),
    engine: EngineKind | None = typer.Option(None, "--engine", help="Analyzer implementation."),
    ktlint: str | None = typer.Option(None, "--ktlint", help="Path to the ktlint executable."),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Worker pool size."),
    ignore_failures: bool = typer.Option(
        False,
        "--ignore-failures",
        help="Report violations without failing the check.",
        is_flag=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.", is_flag=True),
    no_color: bool = typer.Option(False, "--no-color", help="Disable coloured output.", is_flag=True),
    emoji: EMOJI_OPTION = True,
) -> None:
    """Run the check task and exit with its outcome.

    Args:
        root: Project root directory.
        paths: Optional explicit files or directories.
        reporter: Report formats overriding the configured set.
        reports_dir: Report directory override.
        task_name: Task name override.
        cache_dir: Build cache directory override.
        no_cache: Whether to disable the build cache.
        state_dir: Up-to-date state directory override.
        linter_version: ktlint version override.
        engine: Analyzer implementation override.
        ktlint: ktlint executable override.
        jobs: Worker pool size override.
        ignore_failures: Whether violations should not fail the check.
        verbose: Whether to emit debug logging.
        no_color: Whether to disable colour output.
        emoji: Toggle emoji output.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logger = build_cli_logger(emoji=emoji, no_color=no_color)
    resolved_root = root.resolve()
    overrides = CheckOverrides(
        reporters=tuple(reporter or ()),
        reports_dir=reports_dir,
        task_name=task_name,
        cache_dir=cache_dir,
        no_cache=no_cache,
        state_dir=state_dir,
        linter_version=linter_version,
        engine=engine,
        ktlint_executable=ktlint,
        jobs=jobs,
        ignore_failures=ignore_failures,
    )

    try:
        settings = load_settings(resolved_root, overrides)
        task = build_task(settings)
        sources = collect_sources(
            resolved_root,
            tuple(paths or ()),
            patterns=settings.patterns,
            excludes=settings.excludes,
        )
        result = task.execute(sources, settings.rules)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except (CheckIOError, AnalysisError) as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_ERROR) from exc
    except (CheckCancelledError, KeyboardInterrupt) as exc:
        logger.fail("check cancelled")
        raise typer.Exit(code=EXIT_CANCELLED) from exc

    raise typer.Exit(code=render_result(result, settings=settings, logger=logger))


@app.command("reporters")
def reporters() -> None:
    """List supported report formats and their file extensions."""

    for member in ReporterType:
        typer.echo(f"{member.value}\t{member.extension}")


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
