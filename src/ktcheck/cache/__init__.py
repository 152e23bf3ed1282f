# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cache key computation, build cache stores and local execution history."""

from __future__ import annotations

from .history import ExecutionHistory, ExecutionRecord
from .keys import compute_cache_key
from .store import BuildCache, DirectoryBuildCache, InMemoryBuildCache

__all__ = [
    "BuildCache",
    "DirectoryBuildCache",
    "ExecutionHistory",
    "ExecutionRecord",
    "InMemoryBuildCache",
    "compute_cache_key",
]
