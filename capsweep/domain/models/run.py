"""Run-level enums and the tunable run profiles."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional

from capsweep.domain.models.items import ConcurrencyPolicy


class RunMode(str, Enum):
    DELETE = "delete"
    CHECK = "check"


class RunState(str, Enum):
    """States of the run orchestrator.

    SUMMARIZED is reached even when some parents failed. ABORTED is entered
    only on an authentication failure or an unrecoverable collection failure.
    """
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    COLLECTING_PARENTS = "collecting_parents"
    PROCESSING_PARENTS = "processing_parents"
    SUMMARIZED = "summarized"
    ABORTED = "aborted"


@dataclass(frozen=True)
class RunProfile:
    """Timings and sizes for one traversal style.

    Delays are in seconds. Multipliers apply when the remaining quota is
    below `low_water_mark`.
    """
    name: str
    page_size: int = 25
    page_delay: float = 0.2
    page_low_quota_multiplier: float = 5.0
    parent_delay: float = 0.3
    parent_low_quota_multiplier: float = 3.0
    chunk_pause: float = 0.5
    low_water_mark: int = 5
    concurrency: ConcurrencyPolicy = field(default_factory=ConcurrencyPolicy)
    time_budget_seconds: Optional[float] = None

    def with_overrides(self, **changes) -> "RunProfile":
        """Returns a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


STANDARD_PROFILE = RunProfile(name="standard")

FAST_PROFILE = RunProfile(
    name="fast",
    page_size=100,
    page_delay=0.05,
    page_low_quota_multiplier=3.0,
    parent_delay=0.0,
    chunk_pause=0.1,
    low_water_mark=10,
    concurrency=ConcurrencyPolicy(all_at_once_threshold=3, chunk_size=3),
    time_budget_seconds=600.0,
)

PROFILES: Dict[str, RunProfile] = {
    STANDARD_PROFILE.name: STANDARD_PROFILE,
    FAST_PROFILE.name: FAST_PROFILE,
}


def get_profile(name: str) -> RunProfile:
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown profile '{name}'. Choose one of: {', '.join(PROFILES)}") from None
