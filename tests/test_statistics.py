"""Tests for derived run statistics."""

from brandfinder.schemas import BrandResult, TokenUsage
from brandfinder.services.statistics import (
    aggregate_token_usage,
    build_run_record,
    error_breakdown,
    format_success_rate,
)


def result(name, success=True, error_type=None, tokens=0, cost=0.0):
    return BrandResult(
        brand_name=name,
        website_url="https://example.com" if success else None,
        model_used="gpt-4o-mini",
        success=success,
        error_type=error_type,
        token_usage=TokenUsage(prompt_tokens=tokens // 2, completion_tokens=tokens - tokens // 2, total_tokens=tokens, cost=cost),
    )


def test_success_rate_formatting():
    assert format_success_rate(1, 2) == "50.0%"
    assert format_success_rate(2, 3) == "66.7%"
    assert format_success_rate(0, 0) == "0.0%"


def test_error_breakdown_counts_failures_only():
    results = [
        result("A"),
        result("B", success=False, error_type="parse_error"),
        result("C", success=False, error_type="parse_error"),
        result("D", success=False, error_type="network_error"),
    ]
    assert error_breakdown(results) == {"parse_error": 2, "network_error": 1}


def test_mixed_run_metadata():
    """One success plus one model_error gives a 50% run with issues detected."""
    results = [
        result("Acme Blades", tokens=300, cost=12.0),
        result("NoSuchBrand", success=False, error_type="model_error", tokens=100, cost=4.0),
    ]
    record = build_run_record(results, model_key="gpt-4o-mini", model_name="openai/gpt-4o-mini:online")
    meta = record.metadata

    assert meta.total_brands_processed == 2
    assert meta.successful_searches == 1
    assert meta.failed_searches == 1
    assert meta.success_rate == "50.0%"
    assert meta.error_breakdown == {"model_error": 1}
    assert meta.model_availability == "issues_detected"
    assert meta.status is None


def test_availability_ignores_brand_level_failures():
    """Parse and network failures do not mark the model as broken."""
    results = [result("A"), result("B", success=False, error_type="parse_error")]
    assert build_run_record(results, model_key="gpt-4o").metadata.model_availability == "working"


def test_token_aggregation():
    results = [
        result("A", tokens=300, cost=10.0),
        result("B", tokens=101, cost=5.0),
        result("C", success=False, error_type="connection_error"),
    ]
    usage = aggregate_token_usage(results, credit_to_usd=0.000001)

    assert usage.total_tokens == 401
    assert usage.total_prompt_tokens == 150 + 50
    assert usage.total_cost_credits == 15.0
    assert usage.estimated_cost_usd == 0.000015
    assert usage.total_requests == 3
    assert usage.average_tokens_per_brand == 134
    assert usage.average_cost_per_brand == 5.0
    assert [b.brand_name for b in usage.per_brand_breakdown] == ["A", "B", "C"]
    assert usage.per_brand_breakdown[1].total_tokens == 101


def test_empty_run():
    usage = aggregate_token_usage([])
    assert usage.total_requests == 0
    assert usage.average_tokens_per_brand == 0
