"""Opt-in tick timing, enabled with ``SKIMU_DEBUG=1``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

DEBUG_SKIMU = os.getenv("SKIMU_DEBUG", "").lower() in {"1", "true", "yes", "on"}


class TickTimer:
    """Accumulate how long each poll tick takes and log the running average.

    When disabled, :meth:`measure` costs one attribute check per tick.
    """

    def __init__(self, label: str, *, report_every: int = 100, enabled: Optional[bool] = None) -> None:
        self.label = label
        self.report_every = max(1, int(report_every))
        self.enabled = DEBUG_SKIMU if enabled is None else enabled
        self.count = 0
        self.total_s = 0.0
        self.worst_s = 0.0

    @property
    def average_ms(self) -> float:
        return (self.total_s / max(1, self.count)) * 1000.0

    @contextmanager
    def measure(self) -> Iterator[None]:
        if not self.enabled:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.count += 1
            self.total_s += elapsed
            self.worst_s = max(self.worst_s, elapsed)
            if self.count % self.report_every == 0:
                logger.info(
                    "%s avg %.3f ms, worst %.3f ms over %d ticks",
                    self.label,
                    self.average_ms,
                    self.worst_s * 1000.0,
                    self.count,
                )
