# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Analysis engine package initialisation.

Submodules expose the engine adapter, analyzer implementations and version
helpers; import those modules directly instead of relying on package-level
re-exports.
"""

__all__: tuple[str, ...] = ()
