"""Tracks the quota advertised by the API's rate-limit headers.

Every response passes through `RateLimitTracker.update`. The resulting
`QuotaState` is the only mutable state shared by concurrent requests; a plain
last-write-wins update is enough since readers only need an approximate view.
"""

import logging
import time
from typing import Mapping, Optional

from capsweep.domain.models.common import Clock
from capsweep.domain.models.quota import ObservedQuota, QuotaState

logger = logging.getLogger(__name__)

LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
RETRY_AFTER_HEADER = "X-RateLimit-Retry-After"


def parse_header_int(raw: Optional[str]) -> Optional[int]:
    """Parses a non-negative integer header value; anything else is None."""
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if value >= 0 else None


def _lookup(headers: Mapping[str, str], name: str) -> Optional[str]:
    # Header maps from different clients disagree on case handling.
    wanted = name.lower()
    try:
        items = list(headers.items())
    except (AttributeError, TypeError):
        return None
    for key, value in items:
        if str(key).lower() == wanted:
            return value
    return None


class RateLimitTracker:
    """Holds the latest observed quota and applies the header update rule."""

    def __init__(self, state: Optional[QuotaState] = None, clock: Clock = time.time):
        """Initializes the tracker.

        Args:
            state: Existing state to update in place (a fresh one if None).
            clock: Source of the current epoch time, used for `reset_at`.
        """
        self.state = state if state is not None else QuotaState()
        self._clock = clock

    def update(self, headers: Mapping[str, str]) -> ObservedQuota:
        """Folds one response's headers into the shared state.

        Malformed or missing headers are ignored and previous values kept.
        Never raises.

        Args:
            headers: The response header map.

        Returns:
            The state's limit/remaining after the update plus this response's
            retry-after value.
        """
        limit = parse_header_int(_lookup(headers, LIMIT_HEADER))
        remaining = parse_header_int(_lookup(headers, REMAINING_HEADER))
        retry_after = parse_header_int(_lookup(headers, RETRY_AFTER_HEADER))

        if limit is not None:
            self.state.limit = limit
        if remaining is not None:
            self.state.remaining = remaining
        if retry_after is not None:
            self.state.reset_at = self._clock() + retry_after

        return ObservedQuota(
            limit=self.state.limit,
            remaining=self.state.remaining,
            retry_after_seconds=retry_after,
        )

    def is_below(self, low_water_mark: int) -> bool:
        """True when the remaining quota is known and under the mark."""
        remaining = self.state.remaining
        return remaining is not None and remaining < low_water_mark
