"""Accumulates a paginated parent collection.

Known limitation: the number of pages is taken from the first page only and
not re-validated. If videos are added or removed on the server during a run,
the collection can come out short or long. This is intentional behaviour,
not something the collector tries to correct.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from capsweep.domain.events.run_events import PageFetched
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.models.items import PageEnvelope, ParentItem
from capsweep.infrastructure.resilience.throttle import AdaptiveThrottle

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Awaitable[PageEnvelope]]


class PaginatedCollector:
    """Walks pages 1..N and returns every parent in page order."""

    def __init__(
        self,
        throttle: AdaptiveThrottle,
        page_delay: float = 0.2,
        low_quota_multiplier: float = 5.0,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.throttle = throttle
        self.page_delay = page_delay
        self.low_quota_multiplier = low_quota_multiplier
        self.reporter = reporter

    async def collect_all(self, page_fetcher: PageFetcher) -> List[ParentItem]:
        """Fetches every page through `page_fetcher`.

        Any error from the fetcher aborts the whole collection; partial
        results are dropped.

        Args:
            page_fetcher: Returns the PageEnvelope for a 1-based page number.

        Returns:
            All parents, in the order the pages listed them.
        """
        collected: List[ParentItem] = []
        current_page = 1
        total_pages: Optional[int] = None

        while total_pages is None or current_page <= total_pages:
            logger.info(f"Fetching page {current_page} of {total_pages or '?'}...")
            envelope = await page_fetcher(current_page)
            if total_pages is None:
                total_pages = envelope.total_pages

            collected.extend(envelope.items)
            logger.info(f"Found {len(envelope.items)} item(s) on page {current_page} ({len(collected)} total so far)")
            if self.reporter is not None:
                self.reporter.emit(PageFetched(
                    page=current_page,
                    total_pages=total_pages,
                    items_on_page=len(envelope.items),
                    collected_so_far=len(collected),
                ))

            current_page += 1
            if current_page <= total_pages:
                await self.throttle.delay(self.page_delay, self.low_quota_multiplier)

        logger.info(f"Successfully fetched all {len(collected)} item(s).")
        return collected
