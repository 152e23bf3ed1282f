# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build cache stores holding relocatable check results."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import threading
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from pydantic import ValidationError

from ..core.models import ArtifactSet, ReporterType, Violation
from ..errors import UnknownReporterError
from ..filesystem.atomic import atomic_write_bytes

LOGGER = logging.getLogger(__name__)

ENTRY_SCHEMA: Final[int] = 1
SCHEMA_FIELD: Final[str] = "schema"
VIOLATIONS_FIELD: Final[str] = "violations"
REPORTS_FIELD: Final[str] = "reports"


@runtime_checkable
class BuildCache(Protocol):
    """Key/value store for check results shared across executions and machines."""

    def get(self, key: str) -> ArtifactSet | None:
        """Return the artifact set stored under ``key`` or ``None``."""

    def put(self, key: str, artifacts: ArtifactSet) -> None:
        """Store ``artifacts`` under ``key``."""


class _CacheMiss(Exception):
    """Raised when a cache entry cannot be used."""


class InMemoryBuildCache:
    """Process-local build cache backed by a dictionary."""

    def __init__(self) -> None:
        self._entries: dict[str, ArtifactSet] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> ArtifactSet | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, artifacts: ArtifactSet) -> None:
        with self._lock:
            self._entries[key] = artifacts

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DirectoryBuildCache:
    """Persist artifact sets as JSON documents below ``directory``.

    Entries hold report content and violations only, never absolute paths,
    so a directory shared between checkouts serves every project location.
    """

    def __init__(self, directory: Path) -> None:
        """Initialise the cache store rooted at ``directory``.

        Args:
            directory: Filesystem directory used to persist cache entries.
        """

        self._dir = directory

    @property
    def directory(self) -> Path:
        """Return the root directory of the store."""

        return self._dir

    def get(self, key: str) -> ArtifactSet | None:
        """Return the artifact set stored under ``key``; corrupt entries are misses.

        Args:
            key: Cache key produced by :func:`~ktcheck.cache.keys.compute_cache_key`.

        Returns:
            ArtifactSet | None: Stored artifacts, or ``None`` on a miss.
        """

        entry_path = self._entry_path(key)
        if not entry_path.is_file():
            return None
        try:
            return _payload_to_artifacts(self._read_entry(entry_path))
        except _CacheMiss:
            LOGGER.debug("ignoring unusable cache entry %s", entry_path)
            return None

    def put(self, key: str, artifacts: ArtifactSet) -> None:
        """Persist ``artifacts`` under ``key``, ignoring disk errors.

        Args:
            key: Cache key for the execution.
            artifacts: Result bundle to store.
        """

        payload = _artifacts_to_payload(artifacts)
        try:
            atomic_write_bytes(self._entry_path(key), json.dumps(payload, indent=2).encode("utf-8"))
        except OSError as exc:
            # Cache writes are best-effort; a failed store only costs a future miss.
            LOGGER.warning("unable to store build cache entry %s: %s", key, exc)

    def _entry_path(self, key: str) -> Path:
        return self._dir / key[:2] / f"{key}.json"

    def _read_entry(self, entry_path: Path) -> dict[str, object]:
        """Return the parsed JSON payload for ``entry_path`` or raise a cache miss.

        Raises:
            _CacheMiss: If the file cannot be read or does not contain a JSON object.
        """

        try:
            raw = json.loads(entry_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            raise _CacheMiss from exc
        if not isinstance(raw, dict):
            raise _CacheMiss
        return raw


def _artifacts_to_payload(artifacts: ArtifactSet) -> dict[str, object]:
    return {
        SCHEMA_FIELD: ENTRY_SCHEMA,
        VIOLATIONS_FIELD: [violation.model_dump(mode="json") for violation in artifacts.violations],
        REPORTS_FIELD: {
            reporter.value: base64.b64encode(content).decode("ascii")
            for reporter, content in sorted(artifacts.reports.items(), key=lambda item: item[0].value)
        },
    }


def _payload_to_artifacts(payload: dict[str, object]) -> ArtifactSet:
    """Rebuild an :class:`ArtifactSet` from a stored payload.

    Raises:
        _CacheMiss: If the payload does not describe a valid entry.
    """

    if payload.get(SCHEMA_FIELD) != ENTRY_SCHEMA:
        raise _CacheMiss
    raw_violations = payload.get(VIOLATIONS_FIELD)
    raw_reports = payload.get(REPORTS_FIELD)
    if not isinstance(raw_violations, list) or not isinstance(raw_reports, dict):
        raise _CacheMiss
    try:
        violations = tuple(Violation.model_validate(item) for item in raw_violations)
        reports = {
            ReporterType.parse(name): base64.b64decode(str(content), validate=True)
            for name, content in raw_reports.items()
        }
    except (ValidationError, UnknownReporterError, binascii.Error) as exc:
        raise _CacheMiss from exc
    return ArtifactSet(violations=violations, reports=reports)


__all__ = ["BuildCache", "DirectoryBuildCache", "InMemoryBuildCache"]
