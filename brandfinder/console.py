"""Console summaries for runs and stored results."""

from typing import Dict, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from brandfinder.schemas.records import BrandResult, RunTokenUsage
from brandfinder.services.statistics import error_breakdown, format_success_rate, model_failures

console = Console()

ERROR_DESCRIPTIONS: Dict[str, str] = {
    "api_error": "OpenRouter API returned an error",
    "model_error": "Model failed to provide content",
    "network_error": "Network/timeout issues",
    "connection_error": "Connection problems",
    "parse_error": "Could not parse model response",
    "unknown_error": "Unclassified error",
}


def _tokens_suffix(result: BrandResult) -> str:
    return f" ({result.token_usage.total_tokens} tokens)"


def print_token_usage(usage: RunTokenUsage, title: str = "TOKEN USAGE", out: Console = console) -> None:
    """Token and cost totals for a run."""
    out.print(f"\n[bold]🔢 {title}[/bold]")
    out.print("-" * 30)
    out.print(f"Total tokens: {usage.total_tokens:,}")
    out.print(f"  • Prompt tokens: {usage.total_prompt_tokens:,}")
    out.print(f"  • Completion tokens: {usage.total_completion_tokens:,}")
    out.print(f"Total cost: {usage.total_cost_credits:,} credits (~${usage.estimated_cost_usd:.6f})")
    out.print(f"Average per brand: {usage.average_tokens_per_brand} tokens")
    out.print(f"Average cost per brand: {usage.average_cost_per_brand:.2f} credits")
    out.print(f"Total API requests: {usage.total_requests}")


def print_summary(
    model_key: str,
    results: Sequence[BrandResult],
    usage: Optional[RunTokenUsage] = None,
    out: Console = console,
) -> None:
    """Full summary: counts, model health, error breakdown, finds and failures."""
    successful = [r for r in results if r.success]
    failed = [r for r in results if not r.success]
    errors = error_breakdown(results)

    out.print("\n[bold]📊 SUMMARY[/bold]")
    out.print("=" * 50)
    out.print(f"Model used: {escape(model_key)}")
    out.print(f"Total brands processed: {len(results)}")
    out.print(f"Successful searches: {len(successful)}")
    out.print(f"Failed searches: {len(failed)}")
    out.print(f"Success rate: {format_success_rate(len(successful), len(results))}")

    if usage is not None and usage.total_requests > 0:
        print_token_usage(usage, out=out)

    if usage is not None:
        # Health check only for live runs
        bad = model_failures(results)
        if bad:
            out.print("\n[yellow]⚠️  MODEL ISSUES DETECTED:[/yellow]")
            out.print(f"   Model/API errors: {len(bad)}")
            out.print("   This may indicate the model is not working properly")
        else:
            out.print("\n[green]✅ MODEL STATUS: Working properly[/green]")

    if errors:
        out.print("\n[bold]🔍 ERROR BREAKDOWN:[/bold]")
        for error_type, count in errors.items():
            description = ERROR_DESCRIPTIONS.get(error_type, "Unknown error type")
            out.print(f"  • {error_type.replace('_', ' ')}: {count} ({description})")

    out.print("\n[bold]🎯 SUCCESSFUL FINDS:[/bold]")
    if successful:
        for result in successful:
            out.print(f"  • {escape(result.brand_name)}: {escape(str(result.website_url))}{_tokens_suffix(result)}")
    else:
        out.print("  None found")

    out.print("\n[bold]❌ FAILED SEARCHES:[/bold]")
    if failed:
        for result in failed:
            notes = result.notes or "No website found"
            out.print(f"  • {escape(result.brand_name)}: {escape(notes)}{_tokens_suffix(result)}")
    else:
        out.print("  None")

    if usage is not None and len(failed) > len(successful):
        print_recommendations(results, out=out)


def print_recommendations(results: Sequence[BrandResult], out: Console = console) -> None:
    """Hints shown when failures outnumber successes."""
    errors = error_breakdown(results)
    out.print("\n[bold]💡 RECOMMENDATIONS:[/bold]")
    if model_failures(results):
        out.print("  • Try a different model - this one may be experiencing issues")
        out.print("  • Check your OpenRouter API key and account status")
    if errors.get("network_error"):
        out.print("  • Check your internet connection")
        out.print("  • Consider increasing REQUEST_TIMEOUT")
    if errors.get("parse_error"):
        out.print("  • The model may not be following instructions well")
        out.print("  • Try a more capable model like gpt-4o or anthropic/claude-sonnet-4")


def print_partial_summary(results: Sequence[BrandResult], out: Console = console) -> None:
    successful = sum(1 for r in results if r.success)
    out.print(f"\n[bold]📊 PARTIAL SUMMARY ({len(results)} brands processed)[/bold]")
    out.print(f"✅ Successful: {successful}")
    out.print(f"❌ Failed: {len(results) - successful}")
