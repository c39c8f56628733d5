import io

import pytest
from unittest.mock import MagicMock
from rich.console import Console
from rich.panel import Panel

from capsweep.domain.events.run_events import (
    ChildrenDiscovered, DomainEvent, ParentFailed, RetryScheduled, RunSummarized,
)
from capsweep.domain.models.items import ParentItem, ParentResult, RunStats
from capsweep.domain.models.run import RunMode
from capsweep.infrastructure.cli.display import ConsoleDisplay, format_duration

VIDEO = ParentItem("v1", "Intro [draft]")


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with a mocked console."""
    return ConsoleDisplay(console=mock_console)


@pytest.fixture
def recorded():
    """A ConsoleDisplay writing plain text into a buffer."""
    buffer = io.StringIO()
    display = ConsoleDisplay(console=Console(file=buffer, width=120, color_system=None))
    return display, buffer


@pytest.mark.parametrize("seconds, expected", [
    (0, "0m 0s"),
    (75.9, "1m 15s"),
    (3725, "1h 2m 5s"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_display_error(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Test that display_error prints a single panel."""
    console_display.display_error("Something went wrong")
    mock_console.print.assert_called_once()
    args, _ = mock_console.print.call_args
    assert isinstance(args[0], Panel)


def test_display_info(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_info("Starting")
    mock_console.print.assert_called_once()


def test_unknown_events_are_ignored(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.emit(RunSummarized(stats=RunStats()))
    console_display.emit(DomainEvent())
    mock_console.print.assert_not_called()


def test_rendering_errors_are_swallowed(console_display: ConsoleDisplay, mock_console: MagicMock):
    mock_console.print.side_effect = RuntimeError("terminal gone")
    console_display.emit(RetryScheduled(request="GET x", attempt_number=1, max_attempts=4, delay_seconds=1.0, reason="rate_limited"))


def test_discovered_captions_are_listed(recorded):
    display, buffer = recorded

    display.emit(ChildrenDiscovered(index=2, total=5, parent=VIDEO, languages=["en", "fr"]))

    output = buffer.getvalue()
    assert "[2/5]" in output
    assert "Intro [draft]" in output
    assert "en, fr" in output


def test_parent_failure_shows_error_type(recorded):
    display, buffer = recorded

    display.emit(ParentFailed(index=1, total=1, parent=VIDEO, error_type="RetriesExhaustedError", error_message="gave up"))

    assert "RetriesExhaustedError" in buffer.getvalue()


def test_delete_summary(recorded):
    display, buffer = recorded
    stats = RunStats(parents_total=3, elapsed_seconds=120)
    stats.record(ParentResult(parent=VIDEO, languages=["en", "fr"], children_deleted=2))
    stats.record(ParentResult(parent=ParentItem("v2"), languages=[], children_deleted=0))
    stats.record(ParentResult(parent=ParentItem("v3"), languages=["de"], failed=True, error="Token rejected: 401"))

    display.display_summary(stats, RunMode.DELETE)

    output = buffer.getvalue()
    assert "Caption Deletion Summary" in output
    assert "Total captions deleted" in output
    assert "1.0 captions/minute" in output
    assert "Videos failed" in output
    assert "Token rejected: 401" in output


def test_check_summary_all_clear(recorded):
    display, buffer = recorded
    stats = RunStats(parents_total=1)
    stats.record(ParentResult(parent=VIDEO))

    display.display_summary(stats, RunMode.CHECK)

    output = buffer.getvalue()
    assert "Caption Check Summary" in output
    assert "Total captions deleted" not in output
    assert "No captions found!" in output


def test_check_summary_lists_remaining(recorded):
    display, buffer = recorded
    stats = RunStats(parents_total=1)
    stats.record(ParentResult(parent=VIDEO, languages=["en", "es"]))

    display.display_summary(stats, RunMode.CHECK)

    output = buffer.getvalue()
    assert "Videos that still have captions" in output
    assert "en, es" in output
