"""Sequential batch runner and the run state it shares with the signal handler."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from brandfinder.config import Settings
from brandfinder.console import console
from brandfinder.schemas.records import BrandResult

logger = logging.getLogger(__name__)


class RunState:
    """Results published by the runner, read by the interruption handler.

    Each publish replaces an immutable (results, finder) pair in one
    assignment, so a reader never sees a half-built list.
    """

    def __init__(self):
        # Reentrant: signal handlers run on the main thread and may interrupt publish()
        self._lock = threading.RLock()
        self._published: Tuple[Tuple[BrandResult, ...], Any] = ((), None)
        self.shutdown_event = threading.Event()

    @property
    def shutdown_requested(self) -> bool:
        return self.shutdown_event.is_set()

    def request_shutdown(self) -> None:
        self.shutdown_event.set()

    def publish(self, results: Sequence[BrandResult], finder: Any) -> None:
        """Store a snapshot of the results collected so far."""
        with self._lock:
            self._published = (tuple(results), finder)

    def clear(self) -> None:
        """Drop the snapshot once the run has been saved normally."""
        with self._lock:
            self._published = ((), None)

    def snapshot(self) -> Tuple[Tuple[BrandResult, ...], Any]:
        """Latest (results, finder) pair for an emergency save."""
        with self._lock:
            return self._published


class BatchRunner:
    """Processes a slice of the brand list one request at a time."""

    def __init__(self, finder, state: Optional[RunState] = None, delay: float = 1.0, out: Console = console):
        self.finder = finder
        self.state = state or RunState()
        self.delay = delay
        self.out = out

    def run(self, brands: Sequence[str], start_index: int = 0, count: int = 10) -> List[BrandResult]:
        """
        Look up brands[start_index:start_index + count] in order.

        Stops early, returning what was collected, once shutdown is requested.

        Args:
            brands: Full brand list
            start_index: Index of the first brand to process
            count: Maximum number of brands to process

        Returns:
            One result per processed brand, in input order
        """
        batch = list(brands[start_index : start_index + count])
        results: List[BrandResult] = []
        self.state.publish(results, self.finder)

        logger.info(f"Processing {len(batch)} brands using model: {self.finder.model_key}")
        self.out.print(f"🚀 Processing {len(batch)} brands using model: {escape(self.finder.model_key)}")
        self.out.print(f"📋 Brands: {escape(', '.join(batch))}")

        for idx, brand in enumerate(batch):
            if self.state.shutdown_requested:
                logger.info(f"Shutdown requested. Stopping after {idx} brands.")
                break

            self.out.print(f"\n[{idx + 1}/{len(batch)}] Processing: {escape(brand)}")
            result = self.finder.find_brand_website(brand)
            results.append(result)
            self.state.publish(results, self.finder)

            if idx < len(batch) - 1 and not self.state.shutdown_requested:
                # Returns early if shutdown is requested during the pause
                self.state.shutdown_event.wait(self.delay)

        return results


@dataclass
class ExitPolicy:
    """Maps the outcome of a completed run to an exit code."""

    fail_on_all_failed: bool = True
    warn_failure_ratio: float = 0.5

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExitPolicy":
        return cls(
            fail_on_all_failed=settings.FAIL_ON_ALL_FAILED,
            warn_failure_ratio=settings.WARN_FAILURE_RATIO,
        )

    def evaluate(self, results: Sequence[BrandResult], out: Console = console) -> int:
        if not results:
            return 0

        failed = sum(1 for r in results if not r.success)

        if failed == len(results):
            out.print("\n[red]🚨 ALL SEARCHES FAILED - This indicates a serious issue with the model or API[/red]")
            return 1 if self.fail_on_all_failed else 0

        if failed / len(results) > self.warn_failure_ratio:
            out.print("\n[yellow]⚠️  More searches failed than succeeded - Consider investigating[/yellow]")
            return 0

        out.print("\n[green]✅ Search completed successfully[/green]")
        return 0
