# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Relocatable cache keys for check executions."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Sequence
from typing import Final

from ..config.models import RuleConfiguration
from ..core.models import ReporterType, SourceInput, sorted_reporters

CACHE_KEY_SCHEMA: Final[int] = 2


def cache_key_payload(
    sources: Sequence[SourceInput],
    config: RuleConfiguration,
    requested_formats: Iterable[ReporterType],
    *,
    task_name: str,
    analyzer: str,
) -> dict[str, object]:
    """Return the canonical payload hashed by :func:`compute_cache_key`.

    Only project-relative paths and content hashes describe the sources, so
    the payload is identical for a project moved to another directory.
    """

    return {
        "schema": CACHE_KEY_SCHEMA,
        "task": task_name,
        "analyzer": analyzer,
        "sources": sorted([source.relative_path, source.content_hash] for source in sources),
        "config": config.normalized_payload(),
        "reporters": [reporter.value for reporter in sorted_reporters(requested_formats)],
    }


def compute_cache_key(
    sources: Sequence[SourceInput],
    config: RuleConfiguration,
    requested_formats: Iterable[ReporterType],
    *,
    task_name: str,
    analyzer: str,
) -> str:
    """Return the build-cache key for a check execution.

    Args:
        sources: Files under analysis.
        config: Full rule configuration.
        requested_formats: Report formats requested for this execution.
        task_name: Task identity; also names the report files.
        analyzer: Fingerprint of the analyzer producing the violations.

    Returns:
        str: Hex-encoded SHA-256 digest.
    """

    payload = cache_key_payload(sources, config, requested_formats, task_name=task_name, analyzer=analyzer)
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


__all__ = ["CACHE_KEY_SCHEMA", "cache_key_payload", "compute_cache_key"]
