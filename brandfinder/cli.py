"""Command-line entry point for the brand website finder."""

import argparse
import json
import logging
import sys
from typing import List, Optional

import httpx
from rich.console import Console
from rich.markup import escape

from brandfinder.config import Settings, settings as default_settings
from brandfinder.console import console, print_token_usage
from brandfinder.errors import ConfigurationError, MissingCredentialError
from brandfinder.finder import BrandWebsiteFinder, ResultsViewer
from brandfinder.interruption import InterruptionHandler
from brandfinder.runner import BatchRunner, ExitPolicy, RunState

logger = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brandfinder",
        description="Find official websites for knife brands using OpenRouter models with web search",
    )
    parser.add_argument(
        "model_key",
        nargs="?",
        default=None,
        help=f"Model key (default: {settings.DEFAULT_MODEL})",
    )
    parser.add_argument(
        "count",
        nargs="?",
        default=None,
        help=f"Number of brands to process (default: {settings.INITIAL_BRAND_COUNT})",
    )
    parser.add_argument(
        "start_index",
        nargs="?",
        default=None,
        help="Index of the first brand to process (default: 0)",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Run even if sufficient results already exist",
    )
    parser.add_argument(
        "-s",
        "--show",
        action="store_true",
        help="Display existing results and exit without querying the API",
    )
    return parser


def parse_count(value: Optional[str], default: int) -> int:
    """Positive integer, falling back to the default like an unset argument."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return default
    return count if count > 0 else default


def parse_start_index(value: Optional[str]) -> int:
    """
    Raises:
        ConfigurationError: If the index is negative
    """
    try:
        start = int(value)
    except (TypeError, ValueError):
        return 0
    if start < 0:
        raise ConfigurationError(
            f"Start index {start} cannot be negative",
            hint="Use 0 to start from the first brand",
        )
    return start


def load_brands(path: str) -> List[str]:
    """
    Load the brand list (a JSON array of strings).

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a non-empty string array
    """
    hint = f"Make sure {path} exists in the current directory"
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Error loading {path}: {e}", hint=hint)

    if not isinstance(data, list) or not data:
        raise ConfigurationError(
            f"Invalid brand data: {path} should contain an array of brand names",
            hint=hint,
        )
    if not all(isinstance(name, str) for name in data):
        raise ConfigurationError(
            f"Invalid brand data: every entry in {path} must be a string",
            hint=hint,
        )
    return data


def show_existing(viewer: ResultsViewer, count: int, out: Console = console) -> int:
    """Display the best stored run for the viewer's model."""
    check = viewer.check_completion(count)
    out.print(f"📋 {escape(check.message)}")

    if check.record is None:
        out.print("\n❌ No existing results found to display")
        out.print("💡 Run without --show to process new brands")
        return 0

    out.print("\n[bold]📊 EXISTING RESULTS SUMMARY[/bold]")
    out.print("=" * 50)

    usage = check.record.metadata.token_usage
    if usage is not None:
        print_token_usage(usage, title="TOKEN USAGE (from previous run)", out=out)

    viewer.print_summary(check.record.results, usage=usage, out=out)
    out.print(f"\n📁 Results file: {check.filepath}")
    return 0


def run(
    argv: Optional[List[str]] = None,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.BaseTransport] = None,
    install_signals: bool = True,
    out: Console = console,
    state: Optional[RunState] = None,
) -> int:
    """
    Run the finder and return the process exit code.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
        settings: Settings override
        transport: httpx transport override for the backend client
        install_signals: Install the SIGINT/SIGTERM handler
        out: Console for user-facing output
        state: Run state shared with the interruption handler

    Returns:
        Exit code
    """
    settings = settings or default_settings
    args = build_parser(settings).parse_args(argv)

    # Installed before any slow work so an early Ctrl+C exits cleanly
    state = state or RunState()
    if install_signals:
        InterruptionHandler(state, out=out).install()

    model_key = args.model_key or settings.DEFAULT_MODEL
    count = parse_count(args.count, settings.INITIAL_BRAND_COUNT)

    try:
        start_index = parse_start_index(args.start_index)

        out.print("[bold]🔧 CONFIGURATION[/bold]")
        out.print(f"Model: {escape(model_key)}")
        out.print(f"Brands to process: {count}")
        out.print(f"Starting from index: {start_index}")
        if args.force:
            out.print("🔄 Force mode: Will run even if results exist")
        if args.show:
            out.print("👁️  Show mode: Will display existing results")
        out.print(f"Available models: {escape(', '.join(settings.MODELS))}")

        brands = load_brands(settings.BRANDS_FILE)

        try:
            viewer = BrandWebsiteFinder(model_key, settings=settings, transport=transport)
        except MissingCredentialError:
            if not args.show:
                raise
            # Reading stored results needs no credential
            viewer = ResultsViewer(model_key, settings=settings)

        if start_index >= len(brands):
            raise ConfigurationError(
                f"Start index {start_index} is beyond the available brands ({len(brands)})",
                hint=f"Use a start index between 0 and {len(brands) - 1}",
            )
    except ConfigurationError as e:
        logger.error(str(e))
        out.print(f"[red]❌ {escape(str(e))}[/red]")
        if e.hint:
            out.print(f"💡 {escape(e.hint)}")
        return 1

    if args.show:
        out.print("\n🔍 Checking for existing results...")
        return show_existing(viewer, count, out=out)

    finder = viewer
    if not args.force:
        out.print("\n🔍 Checking for existing results...")
        check = finder.check_completion(count)
        out.print(f"📋 {escape(check.message)}")

        if check.has_results:
            out.print("\n[green]✅ Sufficient results already exist![/green]")
            out.print("💡 Options:")
            out.print("   • Run with --force to process anyway")
            out.print("   • Run with --show to view existing results")
            out.print("   • Use a different model")
            out.print("   • Increase the count to process more brands")
            out.print(f"\n📁 Existing results: {check.filepath}")
            return 0

    out.print("\n🚀 Starting brand website search...")
    results = BatchRunner(finder, state, delay=settings.REQUEST_DELAY, out=out).run(brands, start_index, count)

    if state.shutdown_requested:
        # The interruption handler already saved and reported
        return 0

    filepath = finder.save_results(results)
    # A late signal must not write a partial copy of a saved run
    state.clear()
    out.print(f"\n💾 Results saved to: {filepath}")
    finder.print_summary(results, out=out)

    return ExitPolicy.from_settings(settings).evaluate(results, out=out)


def main():
    """Entry point for the brandfinder command."""
    logging.basicConfig(
        level=default_settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        code = run()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        console.print(f"[red]❌ Fatal error: {escape(str(e))}[/red]")
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
