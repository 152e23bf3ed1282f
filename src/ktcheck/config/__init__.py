# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rule configuration models and loaders."""

from __future__ import annotations

from ..errors import ConfigError
from .loader import ProjectSettings, load_project_settings
from .models import DEFAULT_LINTER_VERSION, MINIMUM_SUPPORTED_VERSION, TOOL_DISPLAY_NAME, RuleConfiguration

__all__ = [
    "DEFAULT_LINTER_VERSION",
    "MINIMUM_SUPPORTED_VERSION",
    "TOOL_DISPLAY_NAME",
    "ConfigError",
    "ProjectSettings",
    "RuleConfiguration",
    "load_project_settings",
]
