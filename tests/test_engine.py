# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the analysis engine adapter and analyzers."""

from __future__ import annotations

import json
import subprocess
import threading
import time
from collections.abc import Sequence
from pathlib import Path

import pytest
from packaging.version import Version

from ktcheck.config.models import RuleConfiguration
from ktcheck.core.models import SourceInput, Violation
from ktcheck.engine import analyzers as analyzers_module
from ktcheck.engine.adapter import AnalysisEngine
from ktcheck.engine.analyzers import KtlintCliAnalyzer, TextRuleAnalyzer, parse_ktlint_json
from ktcheck.engine.versioning import VersionFloor, parse_linter_version
from ktcheck.errors import (
    AnalysisError,
    CheckCancelledError,
    ConfigError,
    SourceReadError,
    UnsupportedVersionError,
)


def _source(root: Path, name: str, content: str) -> SourceInput:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return SourceInput.from_path(path, root=root)


class _SlowFirstAnalyzer:
    """Analyzer whose first file completes last."""

    name = "slow-first"
    fingerprint = "slow-first"

    def analyze(self, source: SourceInput, config: RuleConfiguration) -> Sequence[Violation]:
        if source.relative_path.startswith("a"):
            time.sleep(0.2)
        return [Violation(file=source.relative_path, line=1, column=1, rule_id="demo", message="demo")]


def test_version_floor_admits_releases_at_or_above_minimum() -> None:
    floor = VersionFloor("0.10.0")

    assert parse_linter_version("ktlint 0.29.0") == parse_linter_version("0.29.0")
    assert parse_linter_version("nonsense") is None
    assert parse_linter_version(None) is None
    assert floor.admits(Version("0.10.0"))
    assert floor.admits(Version("0.10.1"))
    assert not floor.admits(Version("0.9.9"))


def test_engine_rejects_invalid_minimum_version() -> None:
    with pytest.raises(ConfigError):
        AnalysisEngine(TextRuleAnalyzer(), minimum_version="latest")


def test_validate_rejects_versions_below_floor() -> None:
    engine = AnalysisEngine(TextRuleAnalyzer())

    with pytest.raises(UnsupportedVersionError) as excinfo:
        engine.validate(RuleConfiguration(linter_version="0.9.0"))

    assert str(excinfo.value) == (
        "Ktlint versions less than 0.10.0 are not supported. Detected Ktlint version: 0.9.0."
    )
    assert excinfo.value.minimum == "0.10.0"
    assert excinfo.value.detected == "0.9.0"


def test_validate_rejects_unparseable_versions() -> None:
    engine = AnalysisEngine(TextRuleAnalyzer())

    with pytest.raises(ConfigError, match="Unable to parse Ktlint version"):
        engine.validate(RuleConfiguration(linter_version="latest"))


def test_engine_rejects_non_positive_jobs() -> None:
    with pytest.raises(ConfigError):
        AnalysisEngine(TextRuleAnalyzer(), jobs=0)


def test_run_analyzes_every_file_and_aggregates(tmp_path: Path) -> None:
    sources = [
        _source(tmp_path, "b.kt", "val  b = 1\n"),
        _source(tmp_path, "a.kt", "val  a = 1 \n"),
        _source(tmp_path, "c.kt", "val c = 1\n"),
    ]
    engine = AnalysisEngine(TextRuleAnalyzer(), jobs=3)

    violations = engine.run(sources, RuleConfiguration())

    assert [(item.file, item.rule_id) for item in violations] == [
        ("a.kt", "no-multi-spaces"),
        ("a.kt", "no-trailing-spaces"),
        ("b.kt", "no-multi-spaces"),
    ]


def test_merge_order_does_not_depend_on_completion_order(tmp_path: Path) -> None:
    sources = [_source(tmp_path, name, "") for name in ("c.kt", "a.kt", "b.kt")]
    engine = AnalysisEngine(_SlowFirstAnalyzer(), jobs=3)

    violations = engine.run(sources, RuleConfiguration())

    assert [item.file for item in violations] == ["a.kt", "b.kt", "c.kt"]


def test_run_raises_when_cancelled(tmp_path: Path) -> None:
    sources = [_source(tmp_path, name, "") for name in ("a.kt", "b.kt")]
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(CheckCancelledError):
        AnalysisEngine(_SlowFirstAnalyzer(), jobs=2).run(sources, RuleConfiguration(), cancel_event=cancel)


def test_text_rules_report_expected_messages(tmp_path: Path) -> None:
    source = _source(tmp_path, "sample.kt", 'val  x = "a  b"\nval y = 1  \n\n\nval z = 2')

    violations = TextRuleAnalyzer().analyze(source, RuleConfiguration())

    found = {(item.rule_id, item.line, item.column, item.message) for item in violations}
    assert found == {
        ("no-multi-spaces", 1, 4, "Unnecessary space(s)"),
        ("no-trailing-spaces", 2, 10, "Trailing space(s)"),
        ("no-consecutive-blank-lines", 4, 1, "Needless blank line(s)"),
        ("final-newline", 5, 10, "File must end with a newline (\\n)"),
    }


def test_aligned_end_of_line_comments_are_allowed(tmp_path: Path) -> None:
    source = _source(tmp_path, "comment.kt", "val x = 1   // aligned\n")

    assert TextRuleAnalyzer().analyze(source, RuleConfiguration()) == []


def test_disabled_rules_are_skipped(tmp_path: Path) -> None:
    source = _source(tmp_path, "sample.kt", "val  x = 1 ")
    config = RuleConfiguration(disabled_rules="no-multi-spaces,final-newline")

    violations = TextRuleAnalyzer().analyze(source, config)

    assert [item.rule_id for item in violations] == ["no-trailing-spaces"]


def test_enabled_rules_restrict_analysis(tmp_path: Path) -> None:
    source = _source(tmp_path, "sample.kt", "val  x = 1 ")
    config = RuleConfiguration(enabled_rules=["final-newline"])

    violations = TextRuleAnalyzer().analyze(source, config)

    assert [item.rule_id for item in violations] == ["final-newline"]


def test_editorconfig_overrides_drive_text_rules(tmp_path: Path) -> None:
    source = _source(tmp_path, "sample.kt", "val longName = 12345")
    config = RuleConfiguration(editorconfig_overrides={"max_line_length": 10, "insert_final_newline": False})

    violations = TextRuleAnalyzer().analyze(source, config)

    assert [(item.rule_id, item.message) for item in violations] == [
        ("max-line-length", "Exceeded max line length (10)"),
    ]


def test_unreadable_source_raises_source_read_error(tmp_path: Path) -> None:
    source = _source(tmp_path, "gone.kt", "val x = 1\n")
    source.path.unlink()

    with pytest.raises(SourceReadError):
        TextRuleAnalyzer().analyze(source, RuleConfiguration())


def test_parse_ktlint_json_uses_relative_paths(tmp_path: Path) -> None:
    source = _source(tmp_path, "src/a.kt", "")
    payload = json.dumps(
        [
            {
                "file": str(source.path),
                "errors": [
                    {"line": 2, "column": 5, "message": "Unnecessary space(s)", "rule": "no-multi-spaces"},
                    {"line": 3, "column": 1, "message": "Unused import", "rule": "no-unused-imports"},
                ],
            },
        ],
    )
    config = RuleConfiguration(disabled_rules=["no-unused-imports"])

    violations = parse_ktlint_json(payload, source=source, config=config)

    assert violations == [
        Violation(file="src/a.kt", line=2, column=5, rule_id="no-multi-spaces", message="Unnecessary space(s)"),
    ]


def test_parse_ktlint_json_rejects_garbage(tmp_path: Path) -> None:
    source = _source(tmp_path, "a.kt", "")

    assert parse_ktlint_json("", source=source, config=RuleConfiguration()) == []
    with pytest.raises(AnalysisError):
        parse_ktlint_json("Exception in thread main", source=source, config=RuleConfiguration())


def test_ktlint_cli_command_reflects_configuration(tmp_path: Path) -> None:
    source = _source(tmp_path, "a.kt", "")
    config = RuleConfiguration(android=True, experimental=True, disabled_rules=["b-rule", "a-rule"])

    command = KtlintCliAnalyzer("/opt/ktlint").build_command(source, config)

    assert command == [
        "/opt/ktlint",
        "--reporter=json",
        "--android",
        "--experimental",
        "--disabled_rules=a-rule,b-rule",
        str(source.path),
    ]


def test_ktlint_cli_parses_violation_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _source(tmp_path, "a.kt", "")
    stdout = json.dumps(
        [{"file": "a.kt", "errors": [{"line": 1, "column": 4, "message": "Unnecessary space(s)", "rule": "no-multi-spaces"}]}],
    )

    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 1, stdout=stdout, stderr="")

    monkeypatch.setattr(analyzers_module.subprocess, "run", fake_run)

    violations = KtlintCliAnalyzer().analyze(source, RuleConfiguration())

    assert [item.describe() for item in violations] == ["a.kt:1:4: Unnecessary space(s) (no-multi-spaces)"]


def test_ktlint_cli_unexpected_exit_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _source(tmp_path, "a.kt", "")

    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 2, stdout="", stderr="boom\n")

    monkeypatch.setattr(analyzers_module.subprocess, "run", fake_run)

    with pytest.raises(AnalysisError, match="status 2.*boom"):
        KtlintCliAnalyzer().analyze(source, RuleConfiguration())


def test_ktlint_cli_missing_executable_raises(tmp_path: Path) -> None:
    source = _source(tmp_path, "a.kt", "")

    with pytest.raises(AnalysisError, match="Unable to run"):
        KtlintCliAnalyzer(str(tmp_path / "missing-ktlint")).analyze(source, RuleConfiguration())


def test_parse_ktlint_json_rejects_non_numeric_positions(tmp_path: Path) -> None:
    source = _source(tmp_path, "a.kt", "")
    payload = json.dumps(
        [{"file": "a.kt", "errors": [{"line": "first", "column": 1, "message": "m", "rule": "r"}]}],
    )

    with pytest.raises(AnalysisError, match="non-numeric line 'first'"):
        parse_ktlint_json(payload, source=source, config=RuleConfiguration())


def test_fingerprints_identify_analyzer_and_rule_set() -> None:
    full = TextRuleAnalyzer()
    empty = TextRuleAnalyzer(rules=())

    assert full.fingerprint == (
        "text:final-newline,max-line-length,no-consecutive-blank-lines,no-multi-spaces,no-trailing-spaces"
    )
    assert empty.fingerprint == "text:"
    assert KtlintCliAnalyzer("/opt/tools/ktlint").fingerprint == "ktlint:ktlint"
    assert AnalysisEngine(full).fingerprint == full.fingerprint
    assert len({full.fingerprint, empty.fingerprint, KtlintCliAnalyzer().fingerprint}) == 3
