"""Outcome of a single attempt inside the retrying executor.

A tagged union: exactly one of the four variants is produced per attempt and
drives the executor loop. Outcomes are never persisted.
"""

from dataclasses import dataclass
from typing import Optional, Union

from capsweep.domain.models.http import HttpResponse


@dataclass(frozen=True)
class Success:
    """The server answered with something other than 429."""
    response: HttpResponse


@dataclass(frozen=True)
class Throttled:
    """The server answered 429; `wait_hint` is its retry-after, if any."""
    response: HttpResponse
    wait_hint: Optional[int] = None


@dataclass(frozen=True)
class TransientFailure:
    """The request never produced a response (network/transport error)."""
    error: Exception


@dataclass(frozen=True)
class FatalFailure:
    """The request cannot succeed by retrying."""
    error: Exception


RetryOutcome = Union[Success, Throttled, TransientFailure, FatalFailure]
