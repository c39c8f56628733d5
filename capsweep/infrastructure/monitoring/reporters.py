"""Log-backed and fan-out progress reporters."""

import logging
from typing import Iterable, List

from capsweep.domain.events.run_events import DomainEvent
from capsweep.domain.interfaces.progress import ProgressReporter

logger = logging.getLogger(__name__)


class LoggingReporter(ProgressReporter):
    """Writes every event to the log at DEBUG."""

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    def emit(self, event: DomainEvent) -> None:
        logger.log(self.level, f"EVENT: {event}")


class CompositeReporter(ProgressReporter):
    """Forwards each event to several reporters.

    A reporter that fails is logged and skipped; the others still get the
    event and the caller never sees the error.
    """

    def __init__(self, reporters: Iterable[ProgressReporter]):
        self.reporters: List[ProgressReporter] = list(reporters)

    def emit(self, event: DomainEvent) -> None:
        for reporter in self.reporters:
            try:
                reporter.emit(event)
            except Exception as e:
                logger.error(f"Reporter {type(reporter).__name__} failed on {type(event).__name__}: {e}", exc_info=True)
