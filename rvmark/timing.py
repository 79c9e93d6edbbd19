"""Tick-based timing for the benchmark, modelled on a 100 MHz cycle counter."""

from __future__ import annotations

import time
from collections.abc import Callable
from types import TracebackType

__all__ = [
    "CLOCKS_PER_SEC",
    "TIMER_RES_DIVIDER",
    "EE_TICKS_PER_SEC",
    "DEFAULT_NUM_CONTEXTS",
    "Timer",
    "cycle_clock",
    "time_in_secs",
]

CLOCKS_PER_SEC = 100_000_000
TIMER_RES_DIVIDER = 1
EE_TICKS_PER_SEC = CLOCKS_PER_SEC // TIMER_RES_DIVIDER
DEFAULT_NUM_CONTEXTS = 1

_NS_PER_TICK = 1_000_000_000 // CLOCKS_PER_SEC


def cycle_clock() -> int:
    """Return a monotonic tick count at ``CLOCKS_PER_SEC`` ticks per second."""
    return time.perf_counter_ns() // _NS_PER_TICK


class Timer:
    """Measures ticks between :meth:`start` and :meth:`stop`.

    ``clock`` is any callable returning the current tick count; it defaults
    to :func:`cycle_clock`.  Can be used as a context manager.
    """

    def __init__(self, clock: Callable[[], int] | None = None) -> None:
        self._clock = clock if clock is not None else cycle_clock
        self._start = 0
        self._stop = 0

    def start(self) -> None:
        """Record the start of the timed region."""
        self._start = self._clock()

    def stop(self) -> None:
        """Record the end of the timed region."""
        self._stop = self._clock()

    def elapsed_ticks(self) -> int:
        """Ticks between the last start and stop."""
        return self._stop - self._start

    def __enter__(self) -> Timer:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()


def time_in_secs(ticks: int) -> float:
    """Convert a tick count to seconds."""
    return ticks / EE_TICKS_PER_SEC