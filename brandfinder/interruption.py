"""Graceful shutdown: save partial results on SIGINT/SIGTERM."""

import logging
import os
import signal
import sys
from typing import Callable, Optional

from rich.console import Console

from brandfinder.console import console, print_partial_summary
from brandfinder.runner import RunState
from brandfinder.schemas.records import PARTIAL_STATUS

logger = logging.getLogger(__name__)

RUNNING = "running"
SHUTTING_DOWN = "shutting-down"


class InterruptionHandler:
    """Two-state signal handler.

    The first signal stops the batch, saves whatever the runner last
    published as a partial run and exits 0. A second signal while that is
    in progress exits 1 immediately without saving.
    """

    def __init__(
        self,
        state: RunState,
        out: Console = console,
        exit_func: Callable[[int], None] = sys.exit,
        force_exit_func: Callable[[int], None] = os._exit,
    ):
        self.state = state
        self.out = out
        self.phase = RUNNING
        self._exit = exit_func
        self._force_exit = force_exit_func

    def install(self, signals=(signal.SIGINT, signal.SIGTERM)) -> None:
        for sig in signals:
            signal.signal(sig, self.handle)
        self.out.print("🛡️  Press Ctrl+C to gracefully stop and save partial results")

    def handle(self, signum: int, frame=None) -> None:
        if self.phase == SHUTTING_DOWN:
            self.out.print("\n[red]🚨 Force terminating...[/red]")
            self._force_exit(1)
            return

        self.phase = SHUTTING_DOWN
        self.state.request_shutdown()

        name = signal.Signals(signum).name
        logger.warning(f"Received {name}, saving partial results")
        self.out.print(f"\n\n[yellow]⚠️  Received {name}. Gracefully shutting down...[/yellow]")

        self.save_partial()

        self.out.print("\n👋 Goodbye!")
        self._exit(0)

    def save_partial(self) -> Optional[str]:
        """Save the latest published results as a partial run."""
        results, finder = self.state.snapshot()
        if finder is None or not results:
            self.out.print("📝 No results to save")
            return None

        self.out.print("📝 Saving partial results...")
        try:
            filepath = finder.save_results(results, status=PARTIAL_STATUS)
        except Exception as e:
            logger.error(f"Error saving partial results: {e}", exc_info=True)
            self.out.print(f"[red]❌ Error saving partial results: {e}[/red]")
            return None

        self.out.print(f"💾 Partial results saved to: {filepath}")
        print_partial_summary(results, out=self.out)
        return filepath
