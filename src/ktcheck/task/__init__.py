# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Check task orchestration."""

from __future__ import annotations

from .check import CheckTask

__all__ = ["CheckTask"]
