# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about project-relative filesystem paths."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from fnmatch import fnmatch
from os import PathLike
from pathlib import Path
from typing import Final

_Pathish = str | PathLike[str] | Path

DEFAULT_SOURCE_PATTERNS: Final[tuple[str, ...]] = ("*.kt", "*.kts")
DEFAULT_EXCLUDED_DIRECTORIES: Final[frozenset[str]] = frozenset({".git", ".gradle", "build", "out", ".idea"})


def _best_effort_resolve(path: Path) -> Path:
    """Return ``path`` resolved where possible without raising.

    Args:
        path: Candidate path to resolve.

    Returns:
        Path: Absolute variant when resolution succeeds; otherwise the closest
        achievable approximation.
    """

    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path.absolute() if not path.is_absolute() else path


def normalize_path(path: _Pathish, *, base_dir: _Pathish) -> Path:
    """Return ``path`` normalised relative to ``base_dir``.

    Args:
        path: Filesystem path supplied by the caller.
        base_dir: Base directory used to relativise the path.

    Returns:
        Path: Relative path when both inputs share a lineage, otherwise the
        ``os.path.relpath`` form or the resolved absolute candidate.
    """

    raw_path = Path(path).expanduser()
    base = _best_effort_resolve(Path(base_dir).expanduser())

    candidate = raw_path if raw_path.is_absolute() else base / raw_path
    candidate = _best_effort_resolve(candidate)

    try:
        return candidate.relative_to(base)
    except ValueError:
        try:
            return Path(os.path.relpath(candidate, base))
        except ValueError:
            return candidate


def relative_posix(path: _Pathish, *, base_dir: _Pathish) -> str:
    """Return the POSIX form of ``path`` relative to ``base_dir``.

    Args:
        path: Path for which to build the key.
        base_dir: Project root used for relativisation.

    Returns:
        str: POSIX-style relative representation.
    """

    return normalize_path(path, base_dir=base_dir).as_posix()


def iter_source_files(
    root: Path,
    *,
    patterns: Iterable[str] = DEFAULT_SOURCE_PATTERNS,
    excludes: Iterable[str] = (),
    base_dir: Path | None = None,
) -> Iterator[Path]:
    """Yield files under ``root`` matching ``patterns`` in a stable order.

    Args:
        root: Directory to walk.
        patterns: Filename glob patterns selecting source files.
        excludes: Glob patterns matched against POSIX paths relative to
            ``base_dir``.
        base_dir: Directory the exclude patterns are anchored at; defaults to
            ``root``.

    Yields:
        Path: Matching files sorted by their relative path.
    """

    include = tuple(patterns)
    exclude = tuple(excludes)
    anchor = root if base_dir is None else base_dir
    matches: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in DEFAULT_EXCLUDED_DIRECTORIES)
        for filename in filenames:
            if not any(fnmatch(filename, pattern) for pattern in include):
                continue
            candidate = Path(dirpath) / filename
            relative = relative_posix(candidate, base_dir=anchor)
            if any(fnmatch(relative, pattern) for pattern in exclude):
                continue
            matches.append((relative, candidate))
    for _, candidate in sorted(matches):
        yield candidate


__all__ = (
    "DEFAULT_EXCLUDED_DIRECTORIES",
    "DEFAULT_SOURCE_PATTERNS",
    "iter_source_files",
    "normalize_path",
    "relative_posix",
)
