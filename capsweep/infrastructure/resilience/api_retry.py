"""Service for executing HTTP calls with automatic retries.

Implements exponential backoff for the two retryable situations: a 429 from
the server and a transport failure that produced no response. Every other
status is handed back to the caller untouched; interpreting it is the
caller's job (e.g. a 404 while listing captions simply means "none").
"""

import asyncio
import logging
from typing import Optional

from capsweep.domain.errors import CapsweepError, RetriesExhaustedError, TransportError
from capsweep.domain.events.run_events import DomainEvent, RateLimitLow, RetryScheduled
from capsweep.domain.interfaces.http_transport import HttpTransport
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.models.common import Sleeper
from capsweep.domain.models.http import HttpRequest, HttpResponse
from capsweep.domain.models.retry import (
    FatalFailure, RetryOutcome, Success, Throttled, TransientFailure,
)
from capsweep.infrastructure.resilience.backoff import BackoffPolicy, NETWORK_BACKOFF, THROTTLE_BACKOFF
from capsweep.infrastructure.resilience.rate_limit_tracker import RateLimitTracker

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = 429
DEFAULT_MAX_RETRIES = 3
DEFAULT_WARN_BELOW = 10


class RetryingExecutor:
    """Issues requests through a transport with rate-limit aware retries."""

    def __init__(
        self,
        transport: HttpTransport,
        tracker: RateLimitTracker,
        throttle_backoff: BackoffPolicy = THROTTLE_BACKOFF,
        network_backoff: BackoffPolicy = NETWORK_BACKOFF,
        max_retries: int = DEFAULT_MAX_RETRIES,
        warn_below: int = DEFAULT_WARN_BELOW,
        sleep: Sleeper = asyncio.sleep,
        reporter: Optional[ProgressReporter] = None,
    ):
        """Initializes the RetryingExecutor.

        Args:
            transport: Puts requests on the wire.
            tracker: Receives the headers of every response.
            throttle_backoff: Schedule used after a 429.
            network_backoff: Schedule used after a transport failure.
            max_retries: Default retry budget (attempts = max_retries + 1).
            warn_below: Remaining-quota level that triggers a warning.
            sleep: Awaitable sleep, injectable for tests.
            reporter: Optional sink for retry and low-quota events.
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.transport = transport
        self.tracker = tracker
        self.throttle_backoff = throttle_backoff
        self.network_backoff = network_backoff
        self.max_retries = max_retries
        self.warn_below = warn_below
        self._sleep = sleep
        self._reporter = reporter

        logger.debug(
            f"RetryingExecutor initialized: max_retries={max_retries}, "
            f"throttle_base={throttle_backoff.base_seconds}s, network_base={network_backoff.base_seconds}s"
        )

    def _dispatch_event(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self._reporter is not None:
            self._reporter.emit(event)

    async def _attempt(self, request: HttpRequest) -> RetryOutcome:
        """Runs one attempt and classifies what happened."""
        try:
            response = await self.transport.send(request)
        except TransportError as e:
            return TransientFailure(e)
        except CapsweepError as e:
            return FatalFailure(e)

        observed = self.tracker.update(response.headers)
        if observed.remaining is not None and observed.remaining < self.warn_below:
            logger.warning(f"Rate limit warning: {observed.remaining}/{observed.limit} requests remaining")
            self._dispatch_event(RateLimitLow(remaining=observed.remaining, limit=observed.limit))

        if response.status_code == TOO_MANY_REQUESTS:
            return Throttled(response=response, wait_hint=observed.retry_after_seconds)
        return Success(response)

    async def execute(self, request: HttpRequest, max_retries: Optional[int] = None) -> HttpResponse:
        """Executes the request, retrying 429s and transport failures.

        A 429 consumes one retry slot exactly like a network error. No sleep
        follows the final attempt.

        Args:
            request: The request to issue (reissued unchanged on retry).
            max_retries: Overrides the default retry budget for this call.

        Returns:
            The first response that was not a 429, whatever its status.

        Raises:
            RetriesExhaustedError: After max_retries + 1 failed attempts.
            CapsweepError: Non-retryable errors raised by the transport.
        """
        budget = self.max_retries if max_retries is None else max_retries
        max_attempts = budget + 1
        last_error: Optional[Exception] = None
        last_status: Optional[int] = None

        for attempt in range(max_attempts):
            outcome = await self._attempt(request)

            if isinstance(outcome, Success):
                return outcome.response

            if isinstance(outcome, FatalFailure):
                logger.error(f"Non-retryable error for {request.describe()} on attempt {attempt + 1}: {outcome.error}")
                raise outcome.error

            if isinstance(outcome, Throttled):
                last_error, last_status = None, TOO_MANY_REQUESTS
                delay = self.throttle_backoff.wait_for(attempt, outcome.wait_hint)
                reason = "rate_limited"
            else:
                last_error, last_status = outcome.error, None
                delay = self.network_backoff.wait_for(attempt)
                reason = "network_error"

            if attempt == budget:
                break

            logger.warning(
                f"{'Rate limited' if reason == 'rate_limited' else 'Request failed'} on {request.describe()}. "
                f"Waiting {delay:.2f}s before retry (attempt {attempt + 1}/{max_attempts})..."
            )
            self._dispatch_event(RetryScheduled(
                request=request.describe(),
                attempt_number=attempt + 1,
                max_attempts=max_attempts,
                delay_seconds=delay,
                reason=reason,
            ))
            await self._sleep(delay)

        logger.error(f"Max retries ({budget}) reached for {request.describe()}.")
        raise RetriesExhaustedError(
            request.describe(), max_attempts, last_error=last_error, last_status=last_status
        )
