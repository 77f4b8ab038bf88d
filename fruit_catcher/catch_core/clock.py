"""
Clocks
======

Millisecond time sources for the session. The wall clock drives interactive
play; the simulated clock lets headless runs and tests step time explicitly.
"""

from __future__ import annotations

import time
from typing import Optional


def wall_clock_ms() -> float:
    """Monotonic wall time in milliseconds."""
    return time.monotonic() * 1000.0


class SimulatedClock:
    """
    Manually advanced clock.

    Call the instance to read the current time; call `advance()` once per
    scheduler tick.
    """

    def __init__(self, step_ms: float = 1000.0 / 60.0, start_ms: float = 0.0):
        self._step_ms = step_ms
        self._now_ms = start_ms

    def __call__(self) -> float:
        return self._now_ms

    @property
    def step_ms(self) -> float:
        return self._step_ms

    def advance(self, ms: Optional[float] = None) -> float:
        """Move time forward by `ms` (one step by default) and return the new time."""
        self._now_ms += self._step_ms if ms is None else ms
        return self._now_ms

    def reset(self, start_ms: float = 0.0) -> None:
        self._now_ms = start_ms
