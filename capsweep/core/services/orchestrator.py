"""Top-level run: authenticate, collect videos, then process them one by one.

State machine:
    UNAUTHENTICATED -> AUTHENTICATED -> COLLECTING_PARENTS
        -> PROCESSING_PARENTS -> SUMMARIZED

Only an authentication failure or a failed collection moves the machine to
ABORTED. A failure while handling one video is recorded against that video
and the run moves on to the next one.
"""

import logging
import time
from typing import List, Optional

from capsweep.core.services.batch_deleter import BatchDeleter
from capsweep.core.services.collector import PaginatedCollector
from capsweep.domain.errors import CapsweepError, DeletionAbortedError
from capsweep.domain.events.run_events import (
    ChildrenDiscovered, DomainEvent, ParentCompleted, ParentFailed, ParentStarted,
    PhaseChanged, RunStopped, RunSummarized,
)
from capsweep.domain.interfaces.caption_api import CaptionApi
from capsweep.domain.interfaces.credentials import CredentialProvider
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.models.common import Clock
from capsweep.domain.models.items import ParentItem, ParentResult, RunStats
from capsweep.domain.models.run import RunMode, RunProfile, RunState, STANDARD_PROFILE
from capsweep.infrastructure.resilience.throttle import AdaptiveThrottle

logger = logging.getLogger(__name__)


class RunOrchestrator:
    """Drives one complete run and owns its statistics."""

    def __init__(
        self,
        api: CaptionApi,
        credentials: CredentialProvider,
        collector: PaginatedCollector,
        deleter: BatchDeleter,
        throttle: AdaptiveThrottle,
        profile: RunProfile = STANDARD_PROFILE,
        mode: RunMode = RunMode.DELETE,
        reporter: Optional[ProgressReporter] = None,
        clock: Clock = time.monotonic,
    ):
        """Initializes the RunOrchestrator.

        Args:
            api: Video/caption endpoints.
            credentials: Supplies the API key once per run.
            collector: Walks the paginated video list.
            deleter: Deletes one video's captions in chunks.
            throttle: Paces the loop over videos.
            profile: Page size, delays, chunking and time budget.
            mode: DELETE removes captions, CHECK only reports them.
            reporter: Optional sink for progress events.
            clock: Monotonic clock for the time budget and elapsed time.
        """
        self.api = api
        self.credentials = credentials
        self.collector = collector
        self.deleter = deleter
        self.throttle = throttle
        self.profile = profile
        self.mode = mode
        self.reporter = reporter
        self._clock = clock

        self.state = RunState.UNAUTHENTICATED
        self.stats = RunStats()
        self._started_at: Optional[float] = None

    # --- Helpers ---

    def _emit(self, event: DomainEvent) -> None:
        if self.reporter is not None:
            self.reporter.emit(event)

    def _transition(self, state: RunState) -> None:
        logger.debug(f"Run state: {self.state.value} -> {state.value}")
        self.state = state
        self._emit(PhaseChanged(state=state))

    def _elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def out_of_time(self) -> bool:
        """True once the profile's time budget (if any) is spent."""
        budget = self.profile.time_budget_seconds
        return budget is not None and self._elapsed() >= budget

    # --- Run ---

    async def run(self) -> RunStats:
        """Executes the run and returns its final statistics.

        Raises:
            ConfigurationError / AuthenticationError: Credentials missing or
                rejected (state ABORTED, no video processed).
            CapsweepError: The video collection failed (state ABORTED).
        """
        self._started_at = self._clock()
        try:
            api_key = self.credentials.get_api_key()
            await self.api.authenticate(api_key)
            self._transition(RunState.AUTHENTICATED)

            self._transition(RunState.COLLECTING_PARENTS)
            parents = await self.collector.collect_all(
                lambda page: self.api.fetch_video_page(page, self.profile.page_size)
            )
        except CapsweepError as e:
            logger.error(f"Run aborted in state '{self.state.value}': {e}")
            self.stats.elapsed_seconds = self._elapsed()
            self._transition(RunState.ABORTED)
            raise

        self.stats.parents_total = len(parents)
        self._transition(RunState.PROCESSING_PARENTS)
        await self._process_parents(parents)

        self.stats.elapsed_seconds = self._elapsed()
        self._transition(RunState.SUMMARIZED)
        self._emit(RunSummarized(stats=self.stats))
        logger.info(
            f"Run completed: {self.stats.parents_processed} video(s) processed, "
            f"{self.stats.children_deleted}/{self.stats.children_found} caption(s) deleted"
        )
        return self.stats

    async def _process_parents(self, parents: List[ParentItem]) -> None:
        total = len(parents)
        for index, parent in enumerate(parents, start=1):
            if self.out_of_time():
                self._stop_early(total - index + 1)
                return

            result = await self._process_parent(index, total, parent)
            self.stats.record(result)
            self._emit(ParentCompleted(index=index, total=total, result=result))

            if result.interrupted:
                # The video itself still has captions left.
                self._stop_early(total - index + 1)
                return

            if index < total:
                await self.throttle.delay(self.profile.parent_delay, self.profile.parent_low_quota_multiplier)

    def _stop_early(self, remaining: int) -> None:
        logger.warning(f"Time budget reached. Stopping with {remaining} video(s) left.")
        self.stats.stopped_early = True
        self._emit(RunStopped(reason="time budget reached", parents_remaining=remaining))

    def _stop_check(self, result: ParentResult):
        """Budget check for the deleter that marks `result` once it fires."""
        def should_stop() -> bool:
            if self.out_of_time():
                result.interrupted = True
            return result.interrupted
        return should_stop

    async def _process_parent(self, index: int, total: int, parent: ParentItem) -> ParentResult:
        """Discovers and (in DELETE mode) removes one parent's children.

        Never raises for domain errors: they are folded into a failed result
        that still credits any deletions already confirmed.
        """
        progress = f"[{index}/{total}]"
        self._emit(ParentStarted(index=index, total=total, parent=parent))
        logger.info(f"{progress} Checking captions for video: {parent.display_name()}")
        result = ParentResult(parent=parent)

        try:
            children = await self.api.list_captions(parent.item_id)
            result.languages = [child.language for child in children]
            self._emit(ChildrenDiscovered(index=index, total=total, parent=parent, languages=list(result.languages)))

            if not children:
                logger.info(f"{progress} No captions found for video {parent.item_id}")
                return result

            logger.info(f"{progress} Found {len(children)} caption(s) for video {parent.item_id}: {', '.join(result.languages)}")
            if self.mode is RunMode.CHECK:
                return result

            result.children_deleted = await self.deleter.delete_all(
                parent,
                children,
                self.api.delete_caption,
                self.profile.concurrency,
                should_stop=self._stop_check(result),
            )
            logger.info(f"{progress} Total deleted for this video: {result.children_deleted}/{len(children)} caption(s)")
        except DeletionAbortedError as e:
            result.children_deleted = e.deleted
            self._fail(result, index, total, e.cause)
        except CapsweepError as e:
            self._fail(result, index, total, e)
        return result

    def _fail(self, result: ParentResult, index: int, total: int, error: Exception) -> None:
        result.failed = True
        result.error = str(error)
        logger.error(f"[{index}/{total}] Failed to process video {result.parent.item_id}: {error}")
        self._emit(ParentFailed(
            index=index,
            total=total,
            parent=result.parent,
            error_type=type(error).__name__,
            error_message=str(error),
        ))
