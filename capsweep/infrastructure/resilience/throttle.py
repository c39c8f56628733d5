"""Adaptive pacing between requests.

A heuristic on top of the tracked quota: waits longer while the remaining
quota is under the low-water mark. It reduces 429s but cannot rule them out;
the retrying executor's backoff stays the hard backstop.
"""

import asyncio
import logging
from typing import Optional

from capsweep.domain.events.run_events import ThrottleApplied
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.models.common import Sleeper
from capsweep.infrastructure.resilience.rate_limit_tracker import RateLimitTracker

logger = logging.getLogger(__name__)

DEFAULT_LOW_WATER_MARK = 5
DEFAULT_MULTIPLIER = 5.0


class AdaptiveThrottle:
    """Computes (and sleeps) inter-request delays from quota headroom."""

    def __init__(
        self,
        tracker: RateLimitTracker,
        low_water_mark: int = DEFAULT_LOW_WATER_MARK,
        sleep: Sleeper = asyncio.sleep,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.tracker = tracker
        self.low_water_mark = low_water_mark
        self._sleep = sleep
        self._reporter = reporter

    def is_low(self) -> bool:
        return self.tracker.is_below(self.low_water_mark)

    def compute_delay(self, base_seconds: float, multiplier: float = DEFAULT_MULTIPLIER) -> float:
        """Returns `base_seconds`, or `base_seconds * multiplier` when quota is low."""
        if self.is_low():
            return base_seconds * multiplier
        return base_seconds

    async def delay(self, base_seconds: float, multiplier: float = DEFAULT_MULTIPLIER) -> None:
        """Sleeps the base delay, stretched by `multiplier` while quota is low."""
        seconds = self.compute_delay(base_seconds, multiplier)
        if seconds != base_seconds:
            self._notify_low(seconds)
        if seconds > 0:
            await self._sleep(seconds)

    async def pause_if_low(self, seconds: float) -> bool:
        """Sleeps `seconds` only while quota is low. Returns whether it slept."""
        if not self.is_low() or seconds <= 0:
            return False
        self._notify_low(seconds)
        await self._sleep(seconds)
        return True

    def _notify_low(self, seconds: float) -> None:
        remaining = self.tracker.state.remaining
        logger.info(f"Low rate limit remaining ({remaining}). Waiting {seconds:.2f}s...")
        if self._reporter is not None:
            self._reporter.emit(ThrottleApplied(remaining=remaining, delay_seconds=seconds))
