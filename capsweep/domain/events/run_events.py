"""Domain Events emitted while a run progresses.

Examples include phase changes, retries, throttling decisions and per-video
progress. Reporters decide how (or whether) to render them.
"""

from dataclasses import dataclass, field
import time
from typing import List, Optional

from capsweep.domain.models.common import LanguageTag
from capsweep.domain.models.items import ParentItem, ParentResult, RunStats
from capsweep.domain.models.run import RunState


# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


# --- Resilience Events ---

@dataclass
class RateLimitLow(DomainEvent):
    """Event triggered when a response reports little remaining quota."""
    remaining: int
    limit: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a request."""
    request: str
    attempt_number: int  # 1-based attempt that just failed
    max_attempts: int
    delay_seconds: float
    reason: str  # 'rate_limited' or 'network_error'
    timestamp: float = field(default_factory=time.time)


@dataclass
class ThrottleApplied(DomainEvent):
    """Event triggered when a delay was stretched because quota is low."""
    remaining: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)


# --- Run Events ---

@dataclass
class PhaseChanged(DomainEvent):
    """Event triggered when the orchestrator enters a new state."""
    state: RunState
    timestamp: float = field(default_factory=time.time)


@dataclass
class PageFetched(DomainEvent):
    """Event triggered after each page of videos is collected."""
    page: int
    total_pages: int
    items_on_page: int
    collected_so_far: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ParentStarted(DomainEvent):
    index: int  # 1-based
    total: int
    parent: ParentItem
    timestamp: float = field(default_factory=time.time)


@dataclass
class ChildrenDiscovered(DomainEvent):
    index: int
    total: int
    parent: ParentItem
    languages: List[LanguageTag]
    timestamp: float = field(default_factory=time.time)


@dataclass
class ChunkCompleted(DomainEvent):
    """Event triggered after one chunk of concurrent deletions settles."""
    parent: ParentItem
    first: int  # 1-based position of the chunk's first child
    last: int
    total: int
    succeeded: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class DeletionFailed(DomainEvent):
    parent: ParentItem
    language: LanguageTag
    error_message: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class ParentCompleted(DomainEvent):
    index: int
    total: int
    result: ParentResult
    timestamp: float = field(default_factory=time.time)


@dataclass
class ParentFailed(DomainEvent):
    index: int
    total: int
    parent: ParentItem
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class RunStopped(DomainEvent):
    """Event triggered when the time budget ends a run early."""
    reason: str
    parents_remaining: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RunSummarized(DomainEvent):
    stats: RunStats
    timestamp: float = field(default_factory=time.time)
