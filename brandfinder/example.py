"""Scripted demo: run two models over small slices of the brand list and compare."""

import logging
import sys
from typing import List, Optional, Sequence, Tuple

import httpx
from rich.console import Console
from rich.markup import escape

from brandfinder.cli import load_brands
from brandfinder.config import Settings, settings as default_settings
from brandfinder.console import console
from brandfinder.errors import ConfigurationError
from brandfinder.finder import BrandWebsiteFinder
from brandfinder.runner import BatchRunner

logger = logging.getLogger(__name__)

# (model key, start index, count)
DEFAULT_RUNS: Tuple[Tuple[str, int, int], ...] = (
    ("gpt-4o-mini", 0, 3),
    ("gemini-2.0-flash-001", 3, 2),
)


def run_example(
    settings: Optional[Settings] = None,
    runs: Sequence[Tuple[str, int, int]] = DEFAULT_RUNS,
    transport: Optional[httpx.BaseTransport] = None,
    out: Console = console,
) -> int:
    """
    Process each (model, start, count) slice, save it and print a comparison.

    Returns:
        Exit code
    """
    settings = settings or default_settings
    out.print("[bold]🚀 Knife Brand Website Finder - Example Usage[/bold]\n")

    try:
        brands = load_brands(settings.BRANDS_FILE)
        finders = [BrandWebsiteFinder(model_key, settings=settings, transport=transport) for model_key, _, _ in runs]
    except ConfigurationError as e:
        logger.error(str(e))
        out.print(f"[red]❌ {escape(str(e))}[/red]")
        if e.hint:
            out.print(f"   {escape(e.hint)}")
        return 1

    out.print(f"📋 Loaded {len(brands)} knife brands from {escape(settings.BRANDS_FILE)}\n")

    saved: List[Tuple[str, int, int, str]] = []
    for number, (finder, (model_key, start, count)) in enumerate(zip(finders, runs), start=1):
        out.print(f"[bold]🔍 Example {number}: {escape(model_key)}[/bold]")
        out.print(f"Processing {count} brands from index {start}...\n")

        results = BatchRunner(finder, delay=settings.REQUEST_DELAY, out=out).run(brands, start, count)
        filepath = finder.save_results(results)
        finder.print_summary(results, out=out)

        found = sum(1 for r in results if r.website_url)
        saved.append((model_key, found, len(results), filepath))
        out.print("\n" + "=" * 60 + "\n")

    out.print("[bold]📊 COMPARISON SUMMARY[/bold]")
    for model_key, found, total, _ in saved:
        out.print(f"{escape(model_key)}: {found}/{total} successful")

    out.print("\n📁 Results saved to:")
    for _, _, _, filepath in saved:
        out.print(f"  • {filepath}")

    out.print("\n[green]✅ Example completed successfully![/green]")
    out.print("\n💡 To run with different models:")
    out.print("   brandfinder anthropic/claude-sonnet-4 5")
    out.print("   brandfinder gemini-2.5-pro 10 20")
    return 0


def main():
    """Entry point for the brandfinder-example command."""
    logging.basicConfig(
        level=default_settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(run_example())


if __name__ == "__main__":
    main()
