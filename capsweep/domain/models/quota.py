"""Rate-limit (quota) state as reported by the remote API."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class QuotaState:
    """Latest known quota, shared by every layer of a run.

    Only `RateLimitTracker.update` writes to it. Fields keep their last
    known value when a response omits the corresponding header.
    """
    limit: Optional[int] = None
    remaining: Optional[int] = None
    reset_at: Optional[float] = None  # epoch seconds


@dataclass(frozen=True)
class ObservedQuota:
    """What a single response said about the quota.

    `limit` and `remaining` reflect the tracker state right after the update
    (last-known values), `retry_after_seconds` only what this response carried.
    """
    limit: Optional[int] = None
    remaining: Optional[int] = None
    retry_after_seconds: Optional[int] = None
