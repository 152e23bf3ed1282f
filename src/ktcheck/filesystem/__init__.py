# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem utilities for path handling, source discovery and atomic writes."""

from __future__ import annotations

from .atomic import atomic_write_bytes
from .paths import iter_source_files, normalize_path, relative_posix

__all__ = [
    "atomic_write_bytes",
    "iter_source_files",
    "normalize_path",
    "relative_posix",
]
