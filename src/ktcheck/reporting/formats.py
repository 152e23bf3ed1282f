# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Serialize violation lists into the supported report formats.

Every serializer is a pure function of the violation list: the input is sorted
into canonical order first, so equal lists always render to identical bytes.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable, Sequence
from itertools import groupby
from typing import Final

from ..core.models import ReporterType, Violation
from ..core.severity import severity_to_checkstyle, severity_to_sarif

CHECKSTYLE_VERSION: Final[str] = "8.0"
SARIF_VERSION: Final[str] = "2.1.0"
SARIF_SCHEMA: Final[str] = "https://schemastore.azurewebsites.net/schemas/json/sarif-2.1.0.json"
SARIF_TOOL_NAME: Final[str] = "ktlint"
SARIF_RULE_DESCRIPTION_LIMIT: Final[int] = 120

Serializer = Callable[[Sequence[Violation], str | None], bytes]


def _canonical(violations: Iterable[Violation]) -> list[Violation]:
    return sorted(violations, key=Violation.sort_key)


def _by_file(violations: Sequence[Violation]) -> list[tuple[str, list[Violation]]]:
    return [(path, list(items)) for path, items in groupby(violations, key=lambda violation: violation.file)]


def render_plain(violations: Sequence[Violation], tool_version: str | None = None) -> bytes:
    """Render one ``file:line:column: message (rule)`` line per violation."""

    del tool_version
    lines = [violation.describe() for violation in violations]
    return "".join(f"{line}\n" for line in lines).encode("utf-8")


def render_plain_grouped(violations: Sequence[Violation], tool_version: str | None = None) -> bytes:
    """Render violations grouped under a header line per file."""

    del tool_version
    blocks: list[str] = []
    for path, items in _by_file(violations):
        body = "".join(
            f"  {item.line}:{item.column} {item.message} ({item.rule_id})\n" for item in items
        )
        blocks.append(f"{path}\n{body}")
    return "\n".join(blocks).encode("utf-8")


def render_checkstyle(violations: Sequence[Violation], tool_version: str | None = None) -> bytes:
    """Render a checkstyle-compatible XML document."""

    del tool_version
    root = ET.Element("checkstyle", {"version": CHECKSTYLE_VERSION})
    for path, items in _by_file(violations):
        file_element = ET.SubElement(root, "file", {"name": path})
        for item in items:
            ET.SubElement(
                file_element,
                "error",
                {
                    "line": str(item.line),
                    "column": str(item.column),
                    "severity": severity_to_checkstyle(item.severity),
                    "message": item.message,
                    "source": item.rule_id,
                },
            )
    ET.indent(root, space="    ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def render_json(violations: Sequence[Violation], tool_version: str | None = None) -> bytes:
    """Render the ktlint JSON reporter layout (one entry per file)."""

    del tool_version
    payload = [
        {
            "file": path,
            "errors": [
                {
                    "line": item.line,
                    "column": item.column,
                    "message": item.message,
                    "rule": item.rule_id,
                }
                for item in items
            ],
        }
        for path, items in _by_file(violations)
    ]
    return (json.dumps(payload, indent=2) + "\n").encode("utf-8")


def render_sarif(violations: Sequence[Violation], tool_version: str | None = None) -> bytes:
    """Emit a SARIF document compatible with GitHub and other tools."""

    rules: dict[str, dict[str, object]] = {}
    results: list[dict[str, object]] = []
    for item in violations:
        if item.rule_id not in rules:
            rules[item.rule_id] = {
                "id": item.rule_id,
                "name": item.rule_id,
                "shortDescription": {"text": item.message[:SARIF_RULE_DESCRIPTION_LIMIT]},
            }
        results.append(
            {
                "ruleId": item.rule_id,
                "level": severity_to_sarif(item.severity),
                "message": {"text": item.message},
                "locations": [
                    {
                        "physicalLocation": {
                            "artifactLocation": {"uri": item.file},
                            "region": {"startLine": item.line, "startColumn": item.column},
                        },
                    },
                ],
            },
        )
    document = {
        "version": SARIF_VERSION,
        "$schema": SARIF_SCHEMA,
        "runs": [
            {
                "tool": {
                    "driver": {
                        "name": SARIF_TOOL_NAME,
                        "version": tool_version or "unknown",
                        "rules": [rules[rule_id] for rule_id in sorted(rules)],
                    },
                },
                "results": results,
            },
        ],
    }
    return (json.dumps(document, indent=2) + "\n").encode("utf-8")


SERIALIZERS: Final[dict[ReporterType, Serializer]] = {
    ReporterType.PLAIN: render_plain,
    ReporterType.PLAIN_GROUP_BY_FILE: render_plain_grouped,
    ReporterType.CHECKSTYLE: render_checkstyle,
    ReporterType.JSON: render_json,
    ReporterType.SARIF: render_sarif,
}


def serialize(
    reporter: ReporterType | str,
    violations: Iterable[Violation],
    *,
    tool_version: str | None = None,
) -> bytes:
    """Serialize ``violations`` in the format named by ``reporter``.

    Args:
        reporter: Reporter member or identifier.
        violations: Violations in any order.
        tool_version: Linter version recorded by formats that carry one.

    Returns:
        bytes: Encoded report content.

    Raises:
        UnknownReporterError: If ``reporter`` names an unsupported format.
    """

    resolved = ReporterType.parse(reporter)
    return SERIALIZERS[resolved](_canonical(violations), tool_version)


def extension_of(reporter: ReporterType | str) -> str:
    """Return the file extension used for ``reporter`` reports."""

    return ReporterType.parse(reporter).extension


def report_filename(task_name: str, reporter: ReporterType | str) -> str:
    """Return the deterministic ``<task>.<extension>`` report file name."""

    return f"{task_name}.{extension_of(reporter)}"


__all__ = [
    "SERIALIZERS",
    "extension_of",
    "render_checkstyle",
    "render_json",
    "render_plain",
    "render_plain_grouped",
    "render_sarif",
    "report_filename",
    "serialize",
]
