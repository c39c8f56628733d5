"""Interface for interacting with the user (output only).

Defines the contract for displaying information, warnings, errors and the
final run summary, allowing different UI implementations.
"""

import abc
from typing import Any

from capsweep.domain.models.items import RunStats
from capsweep.domain.models.run import RunMode


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_summary(self, stats: RunStats, mode: RunMode) -> None:
        """Displays the end-of-run summary.

        The summary is the authoritative record of what succeeded and is
        shown even after a fatal error.
        """
        pass
