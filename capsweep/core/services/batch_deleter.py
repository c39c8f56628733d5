"""Deletes one parent's children in bounded, sequential chunks.

Chunks are processed strictly in order. Deletions inside a chunk run
concurrently and may finish in any order. A failed single deletion only
lowers the count. An `AuthenticationError` aborts the batch, since every
remaining call would fail the same way.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from capsweep.domain.errors import AuthenticationError, CapsweepError, DeletionAbortedError
from capsweep.domain.events.run_events import ChunkCompleted, DeletionFailed
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.models.common import ItemId, LanguageTag
from capsweep.domain.models.items import ChildItem, ConcurrencyPolicy, ParentItem
from capsweep.infrastructure.resilience.task_pool import BoundedTaskPool
from capsweep.infrastructure.resilience.throttle import AdaptiveThrottle

logger = logging.getLogger(__name__)

DeleteOne = Callable[[ItemId, LanguageTag], Awaitable[bool]]
StopCheck = Callable[[], bool]


class BatchDeleter:
    """Runs chunked concurrent deletions, pausing between chunks when quota is low."""

    def __init__(
        self,
        throttle: AdaptiveThrottle,
        chunk_pause: float = 0.5,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.throttle = throttle
        self.chunk_pause = chunk_pause
        self.reporter = reporter

    def _emit(self, event) -> None:
        if self.reporter is not None:
            self.reporter.emit(event)

    async def delete_all(
        self,
        parent: ParentItem,
        children: Sequence[ChildItem],
        delete_one: DeleteOne,
        policy: ConcurrencyPolicy,
        should_stop: Optional[StopCheck] = None,
    ) -> int:
        """Deletes every child and returns how many deletions succeeded.

        Args:
            parent: The parent owning `children` (for reporting).
            children: The children to delete.
            delete_one: Deletes a single child; True on success.
            policy: Chunking policy; chunk size is also the parallelism.
            should_stop: Checked before each chunk; True ends the batch early.

        Returns:
            The number of confirmed deletions.

        Raises:
            DeletionAbortedError: A fatal error (rejected token) stopped the
                batch; carries the count confirmed before it.
        """
        chunks = policy.split(children)
        total = len(children)
        deleted = 0
        position = 0

        for index, chunk in enumerate(chunks):
            if should_stop is not None and should_stop():
                logger.info(f"Stop requested; skipping {total - position} remaining deletion(s) for {parent.item_id}")
                break

            first, last = position + 1, position + len(chunk)
            logger.info(f"Deleting batch of {len(chunk)} caption(s) ({first}-{last} of {total}) for {parent.item_id}...")

            succeeded, fatal = await self._run_chunk(parent, chunk, delete_one)
            deleted += succeeded
            position = last
            self._emit(ChunkCompleted(parent=parent, first=first, last=last, total=total, succeeded=succeeded))
            logger.info(f"Successfully deleted {succeeded}/{len(chunk)} caption(s) in this batch")

            if fatal is not None:
                raise DeletionAbortedError(deleted, fatal)

            if index < len(chunks) - 1:
                await self.throttle.pause_if_low(self.chunk_pause)

        return deleted

    async def _run_chunk(
        self, parent: ParentItem, chunk: List[ChildItem], delete_one: DeleteOne
    ):
        pool = BoundedTaskPool(max_concurrency=len(chunk))
        results = await pool.run_all([
            (lambda child=child: delete_one(child.parent_id, child.language)) for child in chunk
        ])

        succeeded = 0
        fatal: Optional[AuthenticationError] = None
        for child, result in zip(chunk, results):
            if result is True:
                succeeded += 1
                continue
            if isinstance(result, AuthenticationError):
                fatal = fatal or result
                message = str(result)
            elif isinstance(result, CapsweepError):
                message = str(result)
            elif isinstance(result, BaseException):
                # Not a deletion failure; let programming errors surface.
                raise result
            else:
                message = "API reported failure"
            logger.error(f"Failed to delete caption ({child.language}) for video {parent.item_id}: {message}")
            self._emit(DeletionFailed(parent=parent, language=child.language, error_message=message))
        return succeeded, fatal
