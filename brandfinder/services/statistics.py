"""Derived run statistics."""

from typing import Dict, Optional, Sequence

from brandfinder.schemas.records import (
    BrandResult,
    BrandTokenUsage,
    RunMetadata,
    RunRecord,
    RunTokenUsage,
)

MODEL_FAILURE_TYPES = ("api_error", "model_error")


def format_success_rate(successful: int, total: int) -> str:
    """Percentage with one decimal, e.g. '50.0%'."""
    if total == 0:
        return "0.0%"
    return f"{successful / total * 100:.1f}%"


def error_breakdown(results: Sequence[BrandResult]) -> Dict[str, int]:
    """Count failed results per error type, in first-seen order."""
    counts: Dict[str, int] = {}
    for result in results:
        if result.success:
            continue
        error_type = result.error_type or "unknown"
        counts[error_type] = counts.get(error_type, 0) + 1
    return counts


def model_failures(results: Sequence[BrandResult]):
    """Failures that point at the model or API rather than the brand."""
    return [r for r in results if not r.success and r.error_type in MODEL_FAILURE_TYPES]


def aggregate_token_usage(
    results: Sequence[BrandResult], credit_to_usd: float = 0.000001
) -> RunTokenUsage:
    """Sum per-brand usage over a run and derive per-request averages."""
    breakdown = [
        BrandTokenUsage(brand_name=r.brand_name, **r.token_usage.model_dump())
        for r in results
    ]
    prompt = sum(b.prompt_tokens for b in breakdown)
    completion = sum(b.completion_tokens for b in breakdown)
    total = sum(b.total_tokens for b in breakdown)
    cost = sum(b.cost for b in breakdown)
    requests = len(breakdown)
    divisor = max(requests, 1)

    return RunTokenUsage(
        total_prompt_tokens=prompt,
        total_completion_tokens=completion,
        total_tokens=total,
        total_cost_credits=cost,
        estimated_cost_usd=round(cost * credit_to_usd, 6),
        average_tokens_per_brand=round(total / divisor),
        average_cost_per_brand=round(cost / divisor, 2),
        total_requests=requests,
        per_brand_breakdown=breakdown,
    )


def build_run_record(
    results: Sequence[BrandResult],
    model_key: str,
    model_name: Optional[str] = None,
    status: Optional[str] = None,
    credit_to_usd: float = 0.000001,
) -> RunRecord:
    """Wrap results in a run record with derived metadata.

    Normal completion and interruption both go through here so the two
    files carry identical statistics.
    """
    results = list(results)
    successful = sum(1 for r in results if r.success)
    failed = len(results) - successful

    metadata = RunMetadata(
        model_used=model_key,
        model_name=model_name,
        total_brands_processed=len(results),
        successful_searches=successful,
        failed_searches=failed,
        success_rate=format_success_rate(successful, len(results)),
        error_breakdown=error_breakdown(results),
        model_availability="working" if not model_failures(results) else "issues_detected",
        status=status,
        token_usage=aggregate_token_usage(results, credit_to_usd),
    )
    return RunRecord(metadata=metadata, results=results)
