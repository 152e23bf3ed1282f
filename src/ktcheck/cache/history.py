# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Local execution history backing up-to-date checks."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..filesystem.atomic import atomic_write_bytes

LOGGER = logging.getLogger(__name__)


class ExecutionRecord(BaseModel):
    """Describe the last successful execution of a task."""

    model_config = ConfigDict(frozen=True)

    task_name: str
    cache_key: str
    outputs: dict[str, str] = Field(default_factory=dict)


def file_digest(path: Path) -> str | None:
    """Return the SHA-256 digest of ``path`` or ``None`` when it cannot be read."""

    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError:
        return None


class ExecutionHistory:
    """Remember the key and output digests of each task's last successful run.

    When ``state_dir`` is ``None`` records are kept in memory only.
    """

    def __init__(self, state_dir: Path | None = None) -> None:
        self._dir = state_dir
        self._records: dict[str, ExecutionRecord] = {}

    def load(self, task_name: str) -> ExecutionRecord | None:
        """Return the record for ``task_name`` or ``None`` when absent or unreadable."""

        if self._dir is None:
            return self._records.get(task_name)
        path = self._record_path(task_name)
        if not path.is_file():
            return None
        try:
            return ExecutionRecord.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError, ValidationError):
            LOGGER.debug("ignoring unreadable execution record %s", path)
            return None

    def record(self, task_name: str, cache_key: str, outputs: Mapping[Path, bytes]) -> None:
        """Store ``cache_key`` and the digests of ``outputs`` for ``task_name``.

        Args:
            task_name: Task identity.
            cache_key: Key of the execution that produced ``outputs``.
            outputs: Written report files mapped to their content.
        """

        entry = ExecutionRecord(
            task_name=task_name,
            cache_key=cache_key,
            outputs={str(path): hashlib.sha256(content).hexdigest() for path, content in outputs.items()},
        )
        if self._dir is None:
            self._records[task_name] = entry
            return
        try:
            atomic_write_bytes(self._record_path(task_name), entry.model_dump_json(indent=2).encode("utf-8"))
        except OSError as exc:
            LOGGER.warning("unable to record execution state for %s: %s", task_name, exc)

    def is_up_to_date(self, task_name: str, cache_key: str, expected_outputs: tuple[Path, ...]) -> bool:
        """Return whether the last execution matches ``cache_key`` and its outputs are intact.

        Args:
            task_name: Task identity.
            cache_key: Key computed for the current inputs and requested formats.
            expected_outputs: Report files the current request must find on disk.

        Returns:
            bool: ``True`` when the key matches and every expected output still
            exists with the recorded content.
        """

        entry = self.load(task_name)
        if entry is None or entry.cache_key != cache_key:
            return False
        for path in expected_outputs:
            recorded = entry.outputs.get(str(path))
            if recorded is None or file_digest(path) != recorded:
                return False
        return True

    def _record_path(self, task_name: str) -> Path:
        assert self._dir is not None
        return self._dir / f"{task_name}.json"


__all__ = ["ExecutionHistory", "ExecutionRecord", "file_digest"]
