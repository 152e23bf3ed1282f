# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Adapter that validates configuration and fans analysis out across files."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Sequence
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Final

from ..config.models import MINIMUM_SUPPORTED_VERSION, TOOL_DISPLAY_NAME, RuleConfiguration
from ..core.models import SourceInput, Violation
from ..errors import CheckCancelledError, ConfigError, UnsupportedVersionError
from .analyzers import Analyzer
from .versioning import VersionFloor, parse_linter_version

LOGGER = logging.getLogger(__name__)

_CANCEL_POLL_INTERVAL_S: Final[float] = 0.05


def default_jobs() -> int:
    """Return the worker pool size used when callers do not provide one."""

    return max(os.cpu_count() or 1, 1)


class AnalysisEngine:
    """Wrap an :class:`Analyzer` with version gating and bounded parallelism."""

    def __init__(
        self,
        analyzer: Analyzer,
        *,
        tool_name: str = TOOL_DISPLAY_NAME,
        minimum_version: str = MINIMUM_SUPPORTED_VERSION,
        jobs: int | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            analyzer: Per-file analyzer implementation.
            tool_name: Display name used in configuration errors.
            minimum_version: Oldest linter release accepted by :meth:`validate`.
            jobs: Worker pool size; defaults to the number of available cores.
        """

        if jobs is not None and jobs < 1:
            raise ConfigError("jobs must be a positive integer")
        self.analyzer = analyzer
        self.tool_name = tool_name
        self.minimum_version = minimum_version
        self.jobs = jobs or default_jobs()
        self._floor = VersionFloor(minimum_version)

    @property
    def fingerprint(self) -> str:
        """Return the analyzer identity that cache keys must distinguish."""

        return self.analyzer.fingerprint

    def validate(self, config: RuleConfiguration) -> None:
        """Reject configurations the underlying linter release cannot honour.

        Args:
            config: Rule configuration to check.

        Raises:
            UnsupportedVersionError: If the configured version is below the floor.
            ConfigError: If the configured version cannot be parsed.
        """

        detected = parse_linter_version(config.linter_version)
        if detected is None:
            raise ConfigError(f"Unable to parse {self.tool_name} version: {config.linter_version!r}")
        if not self._floor.admits(detected):
            raise UnsupportedVersionError(
                tool=self.tool_name,
                minimum=self.minimum_version,
                detected=config.linter_version,
            )

    def run(
        self,
        sources: Sequence[SourceInput],
        config: RuleConfiguration,
        *,
        cancel_event: threading.Event | None = None,
    ) -> tuple[Violation, ...]:
        """Validate ``config`` and analyse every source file.

        Every file is analysed even when earlier files report violations.
        Results are merged and sorted so the output does not depend on the
        order in which workers complete.

        Args:
            sources: Files to analyse.
            config: Rule configuration passed to the analyzer.
            cancel_event: Optional event signalling cancellation.

        Returns:
            tuple[Violation, ...]: All violations in canonical order.

        Raises:
            UnsupportedVersionError: If the configured version is below the floor.
            CheckCancelledError: If ``cancel_event`` is set before all files finish.
        """

        self.validate(config)
        if not sources:
            return ()
        if self.jobs == 1 or len(sources) == 1:
            collected = self._run_serial(sources, config, cancel_event)
        else:
            collected = self._run_parallel(sources, config, cancel_event)
        merged = [violation for batch in collected for violation in batch]
        merged.sort(key=Violation.sort_key)
        LOGGER.debug("analysis finished: files=%d violations=%d", len(sources), len(merged))
        return tuple(merged)

    def _run_serial(
        self,
        sources: Sequence[SourceInput],
        config: RuleConfiguration,
        cancel_event: threading.Event | None,
    ) -> list[tuple[Violation, ...]]:
        results: list[tuple[Violation, ...]] = []
        for source in sources:
            _raise_if_cancelled(cancel_event)
            results.append(tuple(self.analyzer.analyze(source, config)))
        _raise_if_cancelled(cancel_event)
        return results

    def _run_parallel(
        self,
        sources: Sequence[SourceInput],
        config: RuleConfiguration,
        cancel_event: threading.Event | None,
    ) -> list[tuple[Violation, ...]]:
        results: list[tuple[Violation, ...]] = []
        with ThreadPoolExecutor(max_workers=min(self.jobs, len(sources))) as executor:
            pending: set[Future[Sequence[Violation]]] = {
                executor.submit(self.analyzer.analyze, source, config) for source in sources
            }
            try:
                while pending:
                    _raise_if_cancelled(cancel_event)
                    done, pending = wait(pending, timeout=_CANCEL_POLL_INTERVAL_S, return_when=FIRST_COMPLETED)
                    for future in done:
                        results.append(tuple(future.result()))
            except BaseException:
                for future in pending:
                    future.cancel()
                raise
        _raise_if_cancelled(cancel_event)
        return results


def _raise_if_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CheckCancelledError("Check cancelled before all files were analyzed")


__all__ = ["AnalysisEngine", "default_jobs"]
