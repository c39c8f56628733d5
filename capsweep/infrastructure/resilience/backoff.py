"""Exponential backoff schedule.

Pure: computes how long to wait, never sleeps. The executor uses two
instances with different base units: whole seconds after a 429, since the
server governs that quota, and a tenth of a second after a network error.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BackoffPolicy:
    """Computes `base_seconds * 2 ** attempt`, unless the server gave a hint."""
    base_seconds: float = 1.0

    def wait_for(self, attempt: int, hint_seconds: Optional[float] = None) -> float:
        """Returns the wait before the next attempt, in seconds.

        Args:
            attempt: 0-based index of the attempt that just failed.
            hint_seconds: Server-provided retry-after (seconds); wins when set.
        """
        if hint_seconds is not None:
            return float(hint_seconds)
        if attempt < 0:
            raise ValueError(f"attempt must be >= 0, got {attempt}")
        return self.base_seconds * (2 ** attempt)


THROTTLE_BACKOFF = BackoffPolicy(base_seconds=1.0)
NETWORK_BACKOFF = BackoffPolicy(base_seconds=0.1)
