"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), runs the orchestrator
in the requested mode, and always finishes with the summary, even when the
run was aborted. Returns the process exit code.
"""

import logging
from typing import Callable, Optional

from capsweep.core.services.orchestrator import RunOrchestrator
from capsweep.domain.errors import CapsweepError
from capsweep.domain.interfaces.http_transport import HttpTransport
from capsweep.domain.interfaces.user_interface import UserInterface
from capsweep.domain.models.run import RunMode, RunProfile

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1

OrchestratorFactory = Callable[[RunMode, RunProfile], RunOrchestrator]


class CommandHandler:
    """Handles incoming commands and delegates to the run orchestrator."""

    def __init__(
        self,
        build_orchestrator: OrchestratorFactory,
        ui: UserInterface,
        transport: Optional[HttpTransport] = None,
    ):
        """Initializes the CommandHandler.

        Args:
            build_orchestrator: Creates a wired orchestrator for a mode/profile.
            ui: Where messages and the summary are displayed.
            transport: Closed once the command finishes, if given.
        """
        self.build_orchestrator = build_orchestrator
        self.ui = ui
        self.transport = transport

    async def handle_delete(self, profile: RunProfile) -> int:
        """Handles the 'delete' command."""
        logger.info(f"Handling 'delete' command with profile '{profile.name}'")
        self.ui.display_info(f"Starting caption deletion ({profile.name} mode)...")
        return await self._run(RunMode.DELETE, profile)

    async def handle_check(self, profile: RunProfile) -> int:
        """Handles the 'check' command (read-only)."""
        logger.info("Handling 'check' command")
        self.ui.display_info("Starting caption check...")
        return await self._run(RunMode.CHECK, profile)

    async def _run(self, mode: RunMode, profile: RunProfile) -> int:
        orchestrator = self.build_orchestrator(mode, profile)
        exit_code = EXIT_OK
        try:
            await orchestrator.run()
        except CapsweepError as e:
            logger.error(f"Fatal error during '{mode.value}' run: {e}", exc_info=True)
            self.ui.display_error(f"Run aborted: {e}")
            exit_code = EXIT_FATAL
        finally:
            if self.transport is not None:
                await self.transport.aclose()

        self.ui.display_summary(orchestrator.stats, mode)
        return exit_code
