# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build :class:`SourceInput` collections for a project root."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from ..filesystem.paths import DEFAULT_SOURCE_PATTERNS, iter_source_files
from .models import SourceInput


def collect_sources(
    root: Path,
    paths: Sequence[Path] = (),
    *,
    patterns: Iterable[str] = DEFAULT_SOURCE_PATTERNS,
    excludes: Iterable[str] = (),
) -> list[SourceInput]:
    """Return source inputs for ``paths`` (or every matching file under ``root``).

    Args:
        root: Project root; relative identities are computed against it.
        paths: Explicit files or directories. Directories are walked with
            ``patterns``. Defaults to ``root`` itself.
        patterns: Filename globs selecting sources inside directories.
        excludes: Root-relative globs removed from directory walks.

    Returns:
        list[SourceInput]: De-duplicated inputs sorted by relative path.

    Raises:
        SourceReadError: If a selected file cannot be read.
    """

    pattern_list = tuple(patterns)
    exclude_list = tuple(excludes)
    targets = list(paths) or [root]
    files: list[Path] = []
    for target in targets:
        candidate = target if target.is_absolute() else root / target
        if candidate.is_dir():
            files.extend(iter_source_files(candidate, patterns=pattern_list, excludes=exclude_list, base_dir=root))
        else:
            files.append(candidate)

    inputs: dict[str, SourceInput] = {}
    for file_path in files:
        source = SourceInput.from_path(file_path, root=root)
        inputs.setdefault(source.relative_path, source)
    return [inputs[key] for key in sorted(inputs)]


__all__ = ["collect_sources"]
