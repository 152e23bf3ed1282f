# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Report serializers for the supported output formats."""

from .formats import extension_of, report_filename, serialize

__all__ = ["extension_of", "report_filename", "serialize"]
