# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from ktcheck.config.models import RuleConfiguration
from ktcheck.engine.adapter import AnalysisEngine
from ktcheck.engine.analyzers import TextRuleAnalyzer
from ktcheck.task.check import CheckTask

CLEAN_SOURCE = 'val foo = "bar"\n'
FAILING_SOURCE = 'val  foo = "bar"\n'

SourceWriter = Callable[[Path], Path]
TaskFactory = Callable[..., CheckTask]


def _write_source(root: Path, name: str, content: str) -> Path:
    target = root / "src" / "main" / "kotlin" / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


@pytest.fixture
def with_clean_sources() -> SourceWriter:
    """Return a helper writing a source that satisfies every built-in rule."""

    return lambda root: _write_source(root, "clean-source.kt", CLEAN_SOURCE)


@pytest.fixture
def with_failing_sources() -> SourceWriter:
    """Return a helper writing a source containing an unnecessary space."""

    return lambda root: _write_source(root, "fail-source.kt", FAILING_SOURCE)


@pytest.fixture
def make_task() -> TaskFactory:
    """Return a factory building check tasks that report under ``<root>/build/reports/ktlint``."""

    def factory(root: Path, *, jobs: int = 2, **kwargs: object) -> CheckTask:
        engine = AnalysisEngine(TextRuleAnalyzer(), jobs=jobs)
        return CheckTask(engine=engine, reports_dir=root / "build" / "reports" / "ktlint", **kwargs)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Return an empty project directory."""

    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def config() -> RuleConfiguration:
    """Return a configuration requesting plain and checkstyle reports."""

    return RuleConfiguration(reporters=["PLAIN", "CHECKSTYLE"])
