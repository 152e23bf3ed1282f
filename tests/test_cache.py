# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for cache keys, build cache stores and execution history."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ktcheck.cache.history import ExecutionHistory
from ktcheck.cache.keys import cache_key_payload, compute_cache_key
from ktcheck.cache.store import DirectoryBuildCache, InMemoryBuildCache
from ktcheck.config.models import RuleConfiguration
from ktcheck.core.models import ArtifactSet, ReporterType, SourceInput, Violation
from ktcheck.filesystem import atomic as atomic_module
from ktcheck.filesystem.atomic import atomic_write_bytes


def _sources(root: Path, content: str = "val x = 1\n") -> list[SourceInput]:
    path = root / "src" / "main" / "kotlin" / "x.kt"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return [SourceInput.from_path(path, root=root)]


def _key(
    sources,
    config=None,
    formats=(ReporterType.PLAIN,),
    task_name: str = "ktlint-main",
    analyzer: str = "text:no-multi-spaces",
) -> str:
    return compute_cache_key(sources, config or RuleConfiguration(), formats, task_name=task_name, analyzer=analyzer)


def _artifacts() -> ArtifactSet:
    violation = Violation(file="a.kt", line=1, column=4, rule_id="no-multi-spaces", message="Unnecessary space(s)")
    return ArtifactSet(
        violations=(violation,),
        reports={ReporterType.PLAIN: b"a.kt:1:4: Unnecessary space(s) (no-multi-spaces)\n", ReporterType.JSON: b"[]\n"},
    )


def test_key_ignores_reporter_order(tmp_path: Path) -> None:
    sources = _sources(tmp_path)

    first = _key(sources, formats=[ReporterType.JSON, ReporterType.PLAIN])
    second = _key(sources, formats=[ReporterType.PLAIN, ReporterType.JSON])

    assert first == second


def test_key_is_independent_of_project_location(tmp_path: Path) -> None:
    first = _key(_sources(tmp_path / "one"))
    second = _key(_sources(tmp_path / "two"))

    assert first == second
    payload = json.dumps(cache_key_payload(_sources(tmp_path / "one"), RuleConfiguration(), [], task_name="t", analyzer="text:"))
    assert str(tmp_path) not in payload


def test_key_changes_with_requested_formats(tmp_path: Path) -> None:
    sources = _sources(tmp_path)

    assert _key(sources, formats=[ReporterType.PLAIN]) != _key(sources, formats=[ReporterType.PLAIN, ReporterType.JSON])


def test_key_changes_with_source_content(tmp_path: Path) -> None:
    before = _key(_sources(tmp_path))
    after = _key(_sources(tmp_path, "val  x = 1\n"))

    assert before != after


@pytest.mark.parametrize(
    "changed",
    [
        RuleConfiguration(linter_version="0.30.0"),
        RuleConfiguration(disabled_rules=["no-multi-spaces"]),
        RuleConfiguration(editorconfig_overrides={"max_line_length": 120}),
        RuleConfiguration(android=True),
        RuleConfiguration(ignore_failures=True),
    ],
)
def test_key_changes_with_rule_configuration(tmp_path: Path, changed: RuleConfiguration) -> None:
    sources = _sources(tmp_path)

    assert _key(sources, RuleConfiguration()) != _key(sources, changed)


def test_key_ignores_console_preferences(tmp_path: Path) -> None:
    sources = _sources(tmp_path)

    assert _key(sources, RuleConfiguration(output_to_console=False)) == _key(sources, RuleConfiguration())


def test_key_includes_task_name(tmp_path: Path) -> None:
    sources = _sources(tmp_path)

    assert _key(sources, task_name="ktlint-main") != _key(sources, task_name="ktlint-test")


def test_key_includes_analyzer_fingerprint(tmp_path: Path) -> None:
    sources = _sources(tmp_path)

    assert _key(sources, analyzer="text:") != _key(sources, analyzer="text:no-multi-spaces")
    assert _key(sources, analyzer="text:no-multi-spaces") != _key(sources, analyzer="ktlint:ktlint")


def test_in_memory_cache_round_trip() -> None:
    cache = InMemoryBuildCache()

    assert cache.get("missing") is None
    cache.put("key", _artifacts())

    assert "key" in cache
    assert cache.get("key") == _artifacts()


def test_directory_cache_persists_entries(tmp_path: Path) -> None:
    key = "ab" + "0" * 62
    DirectoryBuildCache(tmp_path / "cache").put(key, _artifacts())

    restored = DirectoryBuildCache(tmp_path / "cache").get(key)

    assert restored == _artifacts()
    entry = tmp_path / "cache" / "ab" / f"{key}.json"
    assert entry.is_file()
    assert str(tmp_path) not in entry.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        json.dumps({"schema": 99, "violations": [], "reports": {}}),
        json.dumps({"schema": 1, "violations": [], "reports": {"HTML": ""}}),
        json.dumps({"schema": 1, "violations": [{"file": "a.kt"}], "reports": {}}),
    ],
)
def test_directory_cache_treats_corrupt_entries_as_misses(tmp_path: Path, content: str) -> None:
    key = "cd" + "1" * 62
    entry = tmp_path / "cd" / f"{key}.json"
    entry.parent.mkdir(parents=True)
    entry.write_text(content, encoding="utf-8")

    assert DirectoryBuildCache(tmp_path).get(key) is None


def test_directory_cache_put_failure_is_not_fatal(tmp_path: Path) -> None:
    blocker = tmp_path / "blocked"
    blocker.write_text("file, not a directory", encoding="utf-8")

    DirectoryBuildCache(blocker).put("ef" + "2" * 62, _artifacts())

    assert DirectoryBuildCache(blocker).get("ef" + "2" * 62) is None


def test_history_detects_matching_outputs(tmp_path: Path) -> None:
    report = tmp_path / "reports" / "ktlint-main.txt"
    report.parent.mkdir()
    report.write_bytes(b"content\n")
    history = ExecutionHistory(tmp_path / "state")

    history.record("ktlint-main", "key-1", {report: b"content\n"})

    reloaded = ExecutionHistory(tmp_path / "state")
    assert reloaded.is_up_to_date("ktlint-main", "key-1", (report,))
    assert not reloaded.is_up_to_date("ktlint-main", "key-2", (report,))
    assert not reloaded.is_up_to_date("ktlint-other", "key-1", (report,))


def test_history_rejects_missing_or_modified_outputs(tmp_path: Path) -> None:
    report = tmp_path / "ktlint-main.txt"
    report.write_bytes(b"content\n")
    history = ExecutionHistory()
    history.record("ktlint-main", "key", {report: b"content\n"})

    report.write_bytes(b"edited\n")
    assert not history.is_up_to_date("ktlint-main", "key", (report,))

    report.unlink()
    assert not history.is_up_to_date("ktlint-main", "key", (report,))

    assert not history.is_up_to_date("ktlint-main", "key", (tmp_path / "ktlint-main.xml",))


def test_history_ignores_unreadable_records(tmp_path: Path) -> None:
    (tmp_path / "ktlint-main.json").write_text("{broken", encoding="utf-8")

    assert ExecutionHistory(tmp_path).load("ktlint-main") is None


def test_atomic_write_replaces_content(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "report.txt"

    atomic_write_bytes(target, b"first")
    atomic_write_bytes(target, b"second")

    assert target.read_bytes() == b"second"
    assert [path.name for path in target.parent.iterdir()] == ["report.txt"]


def test_atomic_write_failure_keeps_previous_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "report.txt"
    target.write_bytes(b"previous")

    def explode(src: object, dst: object) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(atomic_module.os, "replace", explode)

    with pytest.raises(OSError, match="replace failed"):
        atomic_write_bytes(target, b"partial")

    assert target.read_bytes() == b"previous"
    assert [path.name for path in tmp_path.iterdir()] == ["report.txt"]
