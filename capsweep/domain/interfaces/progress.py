"""Interface for progress reporting (the observability sink).

The core emits domain events through this port. Implementations must never
raise back into the caller or block it beyond rendering the event.
"""

import abc

from capsweep.domain.events.run_events import DomainEvent


class ProgressReporter(abc.ABC):
    """Abstract Base Class for consuming run events."""

    @abc.abstractmethod
    def emit(self, event: DomainEvent) -> None:
        """Handles a single event."""
        pass
