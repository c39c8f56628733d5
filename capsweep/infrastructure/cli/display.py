import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Type

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from capsweep.domain.events.run_events import (
    ChildrenDiscovered, ChunkCompleted, DeletionFailed, DomainEvent, PageFetched,
    ParentCompleted, ParentFailed, PhaseChanged, RateLimitLow, RetryScheduled,
    RunStopped, ThrottleApplied,
)
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.interfaces.user_interface import UserInterface
from capsweep.domain.models.items import RunStats
from capsweep.domain.models.run import RunMode, RunState

logger = logging.getLogger(__name__)

PHASE_MESSAGES = {
    RunState.AUTHENTICATED: "[green]Authenticated.[/green]",
    RunState.COLLECTING_PARENTS: "Fetching all videos...",
    RunState.PROCESSING_PARENTS: "Processing videos...",
}


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m {secs}s" if hours else f"{minutes}m {secs}s"


class ConsoleDisplay(UserInterface, ProgressReporter):
    """Renders messages, run events and the summary with the rich library."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self.console = console or Console()
        self._renderers: Dict[Type[DomainEvent], Callable[[Any], None]] = {
            PhaseChanged: self._render_phase,
            PageFetched: self._render_page,
            ChildrenDiscovered: self._render_discovered,
            ChunkCompleted: self._render_chunk,
            DeletionFailed: self._render_deletion_failed,
            ParentCompleted: self._render_parent_completed,
            ParentFailed: self._render_parent_failed,
            RetryScheduled: self._render_retry,
            RateLimitLow: self._render_rate_limit,
            ThrottleApplied: self._render_throttle,
            RunStopped: self._render_stopped,
        }

    # --- UserInterface ---

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style."""
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_summary(self, stats: RunStats, mode: RunMode) -> None:
        """Displays the run summary table, then the videos that still have captions.

        Args:
            stats: Final (or partial, after an abort) run statistics.
            mode: Whether captions were deleted or only checked.
        """
        title = "Caption Check Summary" if mode is RunMode.CHECK else "Caption Deletion Summary"
        table = Table(title=title, show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="bold", justify="right")

        table.add_row("Total videos processed", str(stats.parents_processed))
        table.add_row("Videos with captions", str(stats.parents_with_children))
        table.add_row("Total captions found", str(stats.children_found))
        if mode is RunMode.DELETE:
            table.add_row("Total captions deleted", str(stats.children_deleted))
            table.add_row("Average speed", f"{stats.deletion_rate_per_minute:.1f} captions/minute")
        if stats.parents_failed:
            table.add_row("[red]Videos failed[/red]", f"[red]{stats.parents_failed}[/red]")
        if stats.stopped_early:
            table.add_row("[yellow]Stopped early[/yellow]", f"[yellow]{stats.parents_total - stats.parents_processed} video(s) not visited[/yellow]")
        table.add_row("Time taken", format_duration(stats.elapsed_seconds))
        table.add_row("Finished at", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))

        self.console.print("")
        self.console.print(table)

        if stats.incomplete:
            self._display_incomplete(stats)
        elif mode is RunMode.CHECK and stats.parents_processed:
            self.console.print("[bold green]No captions found! All captions have been successfully deleted.[/bold green]")

    def _display_incomplete(self, stats: RunStats) -> None:
        table = Table(title="Videos that still have captions", box=SIMPLE, show_lines=False)
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Video")
        table.add_column("Captions", justify="right")
        table.add_column("Languages / error", style="dim")
        for number, result in enumerate(stats.incomplete, 1):
            left = result.children_found - result.children_deleted
            detail = result.error if result.failed and result.error else ", ".join(result.languages)
            table.add_row(str(number), escape(result.parent.display_name()), str(left), escape(detail))
        self.console.print(table)

    # --- ProgressReporter ---

    def emit(self, event: DomainEvent) -> None:
        """Renders a run event. Rendering problems are logged, never raised."""
        renderer = self._renderers.get(type(event))
        if renderer is None:
            return
        try:
            renderer(event)
        except Exception as e:
            logger.error(f"Error displaying {type(event).__name__}: {e}")

    def _render_phase(self, event: PhaseChanged) -> None:
        message = PHASE_MESSAGES.get(event.state)
        if message:
            self.console.print(message)

    def _render_page(self, event: PageFetched) -> None:
        self.console.print(
            f"[dim]Page {event.page}/{event.total_pages}:[/dim] {event.items_on_page} video(s) "
            f"({event.collected_so_far} total so far)"
        )

    def _render_discovered(self, event: ChildrenDiscovered) -> None:
        progress = f"[cyan][{event.index}/{event.total}][/cyan]"
        if not event.languages:
            self.console.print(f"{progress} [green]No captions[/green] for {escape(event.parent.display_name())}")
        else:
            self.console.print(
                f"{progress} Found {len(event.languages)} caption(s) for {escape(event.parent.display_name())}: "
                f"[bold]{', '.join(event.languages)}[/bold]"
            )

    def _render_chunk(self, event: ChunkCompleted) -> None:
        self.console.print(
            f"    Deleted {event.succeeded}/{event.last - event.first + 1} "
            f"([dim]{event.first}-{event.last} of {event.total}[/dim])"
        )

    def _render_deletion_failed(self, event: DeletionFailed) -> None:
        self.console.print(f"    [red]Failed to delete {event.language}:[/red] {escape(event.error_message)}")

    def _render_parent_completed(self, event: ParentCompleted) -> None:
        result = event.result
        if result.children_deleted:
            self.console.print(
                f"[cyan][{event.index}/{event.total}][/cyan] Total deleted for this video: "
                f"[bold]{result.children_deleted}/{result.children_found}[/bold]"
            )

    def _render_parent_failed(self, event: ParentFailed) -> None:
        self.console.print(
            f"[cyan][{event.index}/{event.total}][/cyan] [red]{event.error_type}[/red] on "
            f"{escape(event.parent.display_name())}: {escape(event.error_message)}"
        )

    def _render_retry(self, event: RetryScheduled) -> None:
        label = "Rate limited" if event.reason == "rate_limited" else "Request failed"
        self.console.print(
            f"[yellow]{label}.[/yellow] Waiting {event.delay_seconds:.2f}s before retry "
            f"(attempt {event.attempt_number}/{event.max_attempts})..."
        )

    def _render_rate_limit(self, event: RateLimitLow) -> None:
        limit = event.limit if event.limit is not None else "?"
        self.console.print(f"[yellow]Rate limit warning:[/yellow] {event.remaining}/{limit} requests remaining")

    def _render_throttle(self, event: ThrottleApplied) -> None:
        self.console.print(
            f"[dim]Low rate limit remaining ({event.remaining}). Waiting {event.delay_seconds:.2f}s...[/dim]"
        )

    def _render_stopped(self, event: RunStopped) -> None:
        self.display_warning(f"Stopping: {event.reason}. {event.parents_remaining} video(s) left unprocessed.")
