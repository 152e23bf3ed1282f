# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Analyzer implementations consumed by :class:`~ktcheck.engine.adapter.AnalysisEngine`."""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from ..config.models import RuleConfiguration
from ..core.models import SourceInput, Violation
from ..core.severity import parse_severity
from ..errors import AnalysisError, SourceReadError

LOGGER = logging.getLogger(__name__)

KTLINT_EXECUTABLE: Final[str] = "ktlint"
KTLINT_VIOLATIONS_EXIT_CODE: Final[int] = 1
DEFAULT_TIMEOUT_S: Final[float] = 120.0
MAX_LINE_LENGTH_KEY: Final[str] = "max_line_length"
INSERT_FINAL_NEWLINE_KEY: Final[str] = "insert_final_newline"


@runtime_checkable
class Analyzer(Protocol):
    """Analyse one source file and return the violations it contains."""

    name: str

    @property
    def fingerprint(self) -> str:
        """Return a location-independent identity folded into cache keys."""

    def analyze(self, source: SourceInput, config: RuleConfiguration) -> Sequence[Violation]:
        """Return every violation found in ``source``."""


class KtlintCliAnalyzer:
    """Run the ``ktlint`` executable with its JSON reporter for each file."""

    name = "ktlint"

    def __init__(self, executable: str = KTLINT_EXECUTABLE, *, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        """Initialise the analyzer.

        Args:
            executable: Path or name of the ktlint binary.
            timeout_s: Upper bound for a single file analysis.
        """

        self._executable = executable
        self._timeout_s = timeout_s

    @property
    def fingerprint(self) -> str:
        """Return the analyzer name and the executable's file name."""

        return f"{self.name}:{Path(self._executable).name}"

    def build_command(self, source: SourceInput, config: RuleConfiguration) -> list[str]:
        """Return the ktlint command line analysing ``source``.

        Args:
            source: File to analyse.
            config: Rule configuration mapped onto ktlint flags.

        Returns:
            list[str]: Command arguments where the first item is the executable.
        """

        command = [self._executable, "--reporter=json"]
        if config.android:
            command.append("--android")
        if config.experimental:
            command.append("--experimental")
        if config.disabled_rules:
            command.append(f"--disabled_rules={','.join(config.disabled_rules)}")
        command.append(str(source.path))
        return command

    def analyze(self, source: SourceInput, config: RuleConfiguration) -> Sequence[Violation]:
        """Run ktlint for ``source`` and parse its JSON report.

        Raises:
            AnalysisError: If ktlint cannot be started, times out, exits with an
                unexpected status or prints something other than its JSON report.
        """

        command = self.build_command(source, config)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=self._timeout_s,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as exc:
            raise AnalysisError(f"ktlint timed out after {self._timeout_s}s on {source.relative_path}") from exc
        except OSError as exc:
            raise AnalysisError(f"Unable to run {self._executable}: {exc}") from exc

        if completed.returncode not in (0, KTLINT_VIOLATIONS_EXIT_CODE):
            stderr_tail = completed.stderr.strip().splitlines()[-1:] or [""]
            raise AnalysisError(
                f"ktlint exited with status {completed.returncode} on {source.relative_path}: {stderr_tail[0]}",
            )
        return parse_ktlint_json(completed.stdout, source=source, config=config)


def parse_ktlint_json(payload: str, *, source: SourceInput, config: RuleConfiguration) -> list[Violation]:
    """Parse the output of ktlint's JSON reporter for a single file.

    Args:
        payload: Raw stdout produced by ``ktlint --reporter=json``.
        source: File the report describes; its relative path replaces the
            path printed by ktlint.
        config: Rule configuration used to drop disabled rules.

    Returns:
        list[Violation]: Violations reported for ``source``.

    Raises:
        AnalysisError: If ``payload`` is not a ktlint JSON report.
    """

    if not payload.strip():
        return []
    try:
        document = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise AnalysisError(f"ktlint produced invalid JSON for {source.relative_path}") from exc
    if not isinstance(document, list):
        raise AnalysisError(f"ktlint JSON report for {source.relative_path} is not a list")

    violations: list[Violation] = []
    for entry in document:
        if not isinstance(entry, dict):
            continue
        for error in entry.get("errors") or ():
            if not isinstance(error, dict):
                continue
            rule_id = str(error.get("rule") or "unknown")
            if not config.is_rule_enabled(rule_id):
                continue
            violations.append(
                Violation(
                    file=source.relative_path,
                    line=_position(error, "line", source),
                    column=_position(error, "column", source),
                    rule_id=rule_id,
                    message=str(error.get("message") or ""),
                    severity=parse_severity(str(error.get("severity") or "")),
                ),
            )
    return violations


def _position(error: dict[str, object], key: str, source: SourceInput) -> int:
    """Return the 1-based ``key`` position of a ktlint error entry.

    Raises:
        AnalysisError: If the value is not an integer.
    """

    raw = error.get(key) or 1
    try:
        return max(int(raw), 1)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise AnalysisError(f"ktlint reported a non-numeric {key} {raw!r} for {source.relative_path}") from exc


Finding = tuple[int, int, str]
RuleCheck = Callable[[Sequence[str], RuleConfiguration], Iterator[Finding]]


@dataclass(frozen=True, slots=True)
class TextRule:
    """Line-oriented rule applied by :class:`TextRuleAnalyzer`."""

    rule_id: str
    check: RuleCheck


def _check_multi_spaces(lines: Sequence[str], config: RuleConfiguration) -> Iterator[Finding]:
    del config
    for number, line in enumerate(lines, start=1):
        for column in _multi_space_columns(line):
            yield number, column, "Unnecessary space(s)"


def _multi_space_columns(line: str) -> Iterator[int]:
    body = line.rstrip(" \t")
    index = len(body) - len(body.lstrip(" \t"))
    in_string = False
    while index < len(body):
        char = body[index]
        if char == '"' and (index == 0 or body[index - 1] != "\\"):
            in_string = not in_string
        elif not in_string and body.startswith("//", index):
            return
        elif not in_string and body.startswith("  ", index):
            end = index
            while end < len(body) and body[end] == " ":
                end += 1
            # aligned end-of-line comments are allowed
            if not body.startswith("//", end):
                yield index + 1
            index = end
            continue
        index += 1


def _check_trailing_spaces(lines: Sequence[str], config: RuleConfiguration) -> Iterator[Finding]:
    del config
    for number, line in enumerate(lines, start=1):
        stripped = line.rstrip(" \t")
        if stripped != line:
            yield number, len(stripped) + 1, "Trailing space(s)"


def _check_consecutive_blank_lines(lines: Sequence[str], config: RuleConfiguration) -> Iterator[Finding]:
    del config
    previous_blank = False
    # the final element is the empty remainder after the last newline
    for number, line in enumerate(lines[:-1], start=1):
        blank = not line.strip()
        if blank and previous_blank:
            yield number, 1, "Needless blank line(s)"
        previous_blank = blank


def _check_final_newline(lines: Sequence[str], config: RuleConfiguration) -> Iterator[Finding]:
    if config.editorconfig_overrides.get(INSERT_FINAL_NEWLINE_KEY) == "false":
        return
    if len(lines) > 1 and lines[-1] == "":
        return
    if lines == [""]:
        return
    yield len(lines), len(lines[-1]) + 1, "File must end with a newline (\\n)"


def _check_max_line_length(lines: Sequence[str], config: RuleConfiguration) -> Iterator[Finding]:
    raw_limit = config.editorconfig_overrides.get(MAX_LINE_LENGTH_KEY)
    if raw_limit is None or not raw_limit.isdigit():
        return
    limit = int(raw_limit)
    for number, line in enumerate(lines, start=1):
        if len(line) > limit:
            yield number, 1, f"Exceeded max line length ({limit})"


BUILTIN_TEXT_RULES: Final[tuple[TextRule, ...]] = (
    TextRule("final-newline", _check_final_newline),
    TextRule("max-line-length", _check_max_line_length),
    TextRule("no-consecutive-blank-lines", _check_consecutive_blank_lines),
    TextRule("no-multi-spaces", _check_multi_spaces),
    TextRule("no-trailing-spaces", _check_trailing_spaces),
)


class TextRuleAnalyzer:
    """Analyse files in-process with a set of line-oriented text rules."""

    name = "text"

    def __init__(self, rules: Sequence[TextRule] = BUILTIN_TEXT_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def fingerprint(self) -> str:
        """Return the analyzer name and its sorted rule identifiers."""

        return f"{self.name}:{','.join(sorted(rule.rule_id for rule in self._rules))}"

    def analyze(self, source: SourceInput, config: RuleConfiguration) -> Sequence[Violation]:
        """Apply every enabled rule to ``source``.

        Raises:
            SourceReadError: If the file cannot be read as UTF-8 text.
        """

        try:
            text = source.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(f"Unable to read source file {source.relative_path}: {exc}") from exc
        lines = [line.removesuffix("\r") for line in text.split("\n")]

        violations: list[Violation] = []
        for rule in self._rules:
            if not config.is_rule_enabled(rule.rule_id):
                continue
            for line, column, message in rule.check(lines, config):
                violations.append(
                    Violation(
                        file=source.relative_path,
                        line=line,
                        column=column,
                        rule_id=rule.rule_id,
                        message=message,
                    ),
                )
        LOGGER.debug("analyzed %s: %d violation(s)", source.relative_path, len(violations))
        return violations


__all__ = [
    "BUILTIN_TEXT_RULES",
    "Analyzer",
    "KtlintCliAnalyzer",
    "TextRule",
    "TextRuleAnalyzer",
    "parse_ktlint_json",
]
