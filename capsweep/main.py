"""Main entry point for the capsweep application.

Sets up the Typer CLI application, performs dependency injection (Composition
Root), defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import functools
from dataclasses import replace
import logging
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from capsweep.core.command_handler import CommandHandler
from capsweep.core.services.batch_deleter import BatchDeleter
from capsweep.core.services.collector import PaginatedCollector
from capsweep.core.services.orchestrator import RunOrchestrator

# --- Domain Layer ---
from capsweep.domain.interfaces.credentials import CredentialProvider
from capsweep.domain.interfaces.http_transport import HttpTransport
from capsweep.domain.interfaces.progress import ProgressReporter
from capsweep.domain.models.run import RunMode, RunProfile, get_profile

# --- Infrastructure Layer ---
from capsweep.infrastructure.api.credentials import EnvCredentialProvider
from capsweep.infrastructure.api.video_api import ApiVideoClient
from capsweep.infrastructure.cli.display import ConsoleDisplay
from capsweep.infrastructure.config.settings import (
    get_base_url, get_config, get_http_timeout, get_max_retries, get_page_size,
    get_profile_name, load_configuration,
)
from capsweep.infrastructure.http.httpx_transport import HttpxTransport, build_async_client
from capsweep.infrastructure.monitoring.logger_setup import DEFAULT_LOG_FORMAT, parse_log_level, setup_logging
from capsweep.infrastructure.monitoring.reporters import CompositeReporter, LoggingReporter
from capsweep.infrastructure.resilience.api_retry import RetryingExecutor
from capsweep.infrastructure.resilience.rate_limit_tracker import RateLimitTracker
from capsweep.infrastructure.resilience.throttle import AdaptiveThrottle

logger = logging.getLogger(__name__)


# --- Dependency Injection (Manual) ---

def build_orchestrator(
    mode: RunMode,
    profile: RunProfile,
    *,
    transport: HttpTransport,
    credentials: CredentialProvider,
    reporter: ProgressReporter,
    base_url: str,
    max_retries: int,
) -> RunOrchestrator:
    """Wires one run. Each run gets its own quota state."""
    tracker = RateLimitTracker()
    throttle = AdaptiveThrottle(tracker, low_water_mark=profile.low_water_mark, reporter=reporter)
    executor = RetryingExecutor(transport, tracker, max_retries=max_retries, reporter=reporter)
    return RunOrchestrator(
        api=ApiVideoClient(executor, base_url=base_url),
        credentials=credentials,
        collector=PaginatedCollector(
            throttle,
            page_delay=profile.page_delay,
            low_quota_multiplier=profile.page_low_quota_multiplier,
            reporter=reporter,
        ),
        deleter=BatchDeleter(throttle, chunk_pause=profile.chunk_pause, reporter=reporter),
        throttle=throttle,
        profile=profile,
        mode=mode,
        reporter=reporter,
    )


def configure(verbose: bool = False) -> None:
    """Loads configuration and sets up logging. Safe to call more than once."""
    load_configuration()
    log_level = logging.DEBUG if verbose else parse_log_level(get_config('logging.level'))
    setup_logging(
        log_level=log_level,
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', DEFAULT_LOG_FORMAT),
    )
    logger.debug("Configuration and logging initialized.")


def create_dependencies(max_retries: Optional[int] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. Configuration must already be loaded.
    """
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['reporter'] = CompositeReporter([dependencies['ui'], LoggingReporter()])
    dependencies['transport'] = HttpxTransport(build_async_client(get_http_timeout()))
    dependencies['credentials'] = EnvCredentialProvider()

    dependencies['command_handler'] = CommandHandler(
        build_orchestrator=functools.partial(
            build_orchestrator,
            transport=dependencies['transport'],
            credentials=dependencies['credentials'],
            reporter=dependencies['reporter'],
            base_url=get_base_url(),
            max_retries=max_retries if max_retries is not None else get_max_retries(),
        ),
        ui=dependencies['ui'],
        transport=dependencies['transport'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


def resolve_profile(
    name: Optional[str],
    page_size: Optional[int] = None,
    time_budget: Optional[float] = None,
) -> RunProfile:
    """Looks up a profile and applies command-line and config overrides.

    A time budget of 0 disables the budget entirely.
    """
    try:
        profile = get_profile(name or get_profile_name())
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--profile")
    profile = profile.with_overrides(page_size=page_size or get_page_size())
    if time_budget is not None:
        profile = replace(profile, time_budget_seconds=time_budget if time_budget > 0 else None)
    return profile


# --- Typer App Definition ---
app = typer.Typer(
    name="capsweep",
    help="capsweep: delete (or check) every caption track on an api.video account, staying under the rate limit.",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, int]) -> None:
    """Runs an async command from a sync Typer command and exits with its code."""
    exit_code = asyncio.run(coro)
    if exit_code:
        raise typer.Exit(code=exit_code)


# --- CLI Options ---

ProfileOption = Annotated[
    Optional[str],
    typer.Option("--profile", "-p", help="Run profile: 'standard' (gentle) or 'fast' (10-minute budget)."),
]
PageSizeOption = Annotated[
    Optional[int],
    typer.Option("--page-size", min=1, max=100, help="Videos requested per page."),
]
MaxRetriesOption = Annotated[
    Optional[int],
    typer.Option("--max-retries", min=0, help="Retries per request after a 429 or network error."),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging."),
]


@app.command()
def delete(
    profile: ProfileOption = None,
    page_size: PageSizeOption = None,
    max_retries: MaxRetriesOption = None,
    time_budget: Annotated[
        Optional[float],
        typer.Option("--time-budget", min=0, help="Stop after this many seconds (0 disables)."),
    ] = None,
    verbose: VerboseOption = False,
):
    """Delete every caption track of every video."""
    configure(verbose)
    selected = resolve_profile(profile, page_size, time_budget)
    dependencies = create_dependencies(max_retries=max_retries)
    handler: CommandHandler = dependencies['command_handler']
    run_async(handler.handle_delete(selected))


@app.command()
def check(
    page_size: PageSizeOption = None,
    max_retries: MaxRetriesOption = None,
    verbose: VerboseOption = False,
):
    """List videos that still have captions, without deleting anything."""
    configure(verbose)
    selected = resolve_profile("standard", page_size)
    dependencies = create_dependencies(max_retries=max_retries)
    handler: CommandHandler = dependencies['command_handler']
    run_async(handler.handle_check(selected))


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
