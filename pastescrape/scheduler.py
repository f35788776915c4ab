"""
Cycle scheduling.

Cycles run on the calling thread, so two cycles never overlap. Ticks fall on
start + n * interval; ticks missed while a cycle overran are dropped.
"""

import time
from typing import Any, Callable, Optional

from .logger import get_logger


class Scheduler:
    """Runs a cycle once, N times, or until stopped, on a fixed interval."""

    def __init__(
        self,
        cycle: Callable[[], Any],
        interval_minutes: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self.cycle = cycle
        self.interval = interval_minutes * 60.0
        self._sleep = sleep
        self._clock = clock
        self._stopped = False
        self.cycles_run = 0
        self.ticks_dropped = 0

    def stop(self) -> None:
        """Stop before the next cycle starts. A running cycle is not interrupted."""
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def run_once(self) -> Any:
        """Run one cycle now and return its result."""
        logger = get_logger()
        begin = self._clock()
        result = self.cycle()
        self.cycles_run += 1
        logger.info(f"Completed scrape in {self._clock() - begin:.2f} seconds.")
        return result

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Wait one interval, run a cycle, repeat.

        Args:
            max_cycles: Stop after this many cycles (None = until stop())

        Returns:
            Number of cycles run by this call
        """
        logger = get_logger()
        completed = 0
        next_tick = self._clock() + self.interval

        while not self._stopped and (max_cycles is None or completed < max_cycles):
            wait = next_tick - self._clock()
            if wait > 0:
                self._sleep(wait)
            if self._stopped:
                break

            self.run_once()
            completed += 1
            if self._stopped or (max_cycles is not None and completed >= max_cycles):
                break

            next_tick += self.interval
            now = self._clock()
            if next_tick <= now:
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval
                self.ticks_dropped += missed
                logger.warning("Cycle overran the interval; skipping missed ticks", missed=missed)

        return completed
