"""Progress aggregation across concurrently processed files."""

from __future__ import annotations

import logging
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class ProgressTracker:
    """Count completed files and report an integer percentage.

    Increments happen on the event loop thread only, so the counter needs no
    lock. Each file must call :meth:`advance` exactly once.
    """

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None) -> None:
        self.total = total
        self.completed = 0
        self.callback = callback
        self._last_reported = 0

    @property
    def percent(self) -> int:
        return round(self.completed / (self.total or 1) * 100)

    def advance(self) -> int:
        """Record one finished file and report the new percentage."""
        if self.completed >= self.total:
            raise RuntimeError("progress advanced past the batch size")
        self.completed += 1
        return self._report(self.percent)

    def finish_empty(self) -> int:
        """Report completion for a batch with no files."""
        return self._report(100)

    def _report(self, value: int) -> int:
        value = max(value, self._last_reported)
        self._last_reported = value
        if self.callback is not None:
            try:
                self.callback(value)
            except Exception:
                LOGGER.exception("Progress callback raised; continuing ingestion.")
        return value


__all__ = ["ProgressCallback", "ProgressTracker"]
