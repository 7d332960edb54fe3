"""Tests for the completion store."""

import json
import os

from brandfinder.schemas import PARTIAL_STATUS, BrandResult
from brandfinder.services.completion_store import (
    CompletionStore,
    load_run,
    parse_result_filename,
    result_filename,
    sanitize_model_key,
)
from brandfinder.services.statistics import build_run_record


def make_record(model_key, found, failed=0):
    results = [
        BrandResult(brand_name=f"Found {i}", website_url=f"https://found{i}.com", model_used=model_key, success=True)
        for i in range(found)
    ]
    results += [
        BrandResult(brand_name=f"Failed {i}", model_used=model_key, success=False, error_type="parse_error")
        for i in range(failed)
    ]
    return build_run_record(results, model_key=model_key)


def write_record(results_dir, model_key, record, stamp, partial=False):
    os.makedirs(results_dir, exist_ok=True)
    path = os.path.join(results_dir, result_filename(model_key, partial=partial, timestamp=stamp))
    with open(path, "w") as f:
        json.dump(record.to_json_dict(), f)
    return path


def test_sanitize_model_key():
    """Test slashes and other unsafe characters become underscores."""
    assert sanitize_model_key("anthropic/claude-sonnet-4") == "anthropic_claude-sonnet-4"
    assert sanitize_model_key('a\\b:c*d?e"f<g>h|i') == "a_b_c_d_e_f_g_h_i"
    assert sanitize_model_key("gpt-4o-mini") == "gpt-4o-mini"


def test_result_filename_format():
    """Test timestamp punctuation is replaced and partial marker placed before it."""
    stamp = "2025-06-01T12:30:45.123Z"
    assert result_filename("anthropic/claude-sonnet-4", timestamp=stamp) == (
        "brand_websites_anthropic_claude-sonnet-4_2025-06-01T12-30-45-123Z.json"
    )
    assert result_filename("gpt-4o", partial=True, timestamp=stamp) == (
        "brand_websites_gpt-4o_PARTIAL_2025-06-01T12-30-45-123Z.json"
    )


def test_parse_result_filename():
    assert parse_result_filename("brand_websites_gpt-4o_2025-06-01T12-30-45-123Z.json") == ("gpt-4o", False)
    assert parse_result_filename("brand_websites_gpt-4o_PARTIAL_2025-06-01T12-30-45-123Z.json") == ("gpt-4o", True)
    assert parse_result_filename("notes.json") is None


def test_save_and_load(results_dir):
    """Test saved runs load back unchanged."""
    store = CompletionStore(results_dir)
    record = make_record("anthropic/claude-sonnet-4", found=2, failed=1)

    path = store.save_run(record)

    assert os.path.basename(path).startswith("brand_websites_anthropic_claude-sonnet-4_")
    assert "_PARTIAL_" not in path
    assert load_run(path).results == record.results


def test_save_partial_marker(results_dir):
    store = CompletionStore(results_dir)
    record = make_record("gpt-4o", found=1)
    path = store.save_run(record, partial=True)
    assert "_PARTIAL_" in os.path.basename(path)


def test_missing_directory(tmp_path):
    """Test a missing directory means no results."""
    check = CompletionStore(str(tmp_path / "nope")).check("gpt-4o", 1)
    assert not check.has_results
    assert "No existing results" in check.message


def test_selects_best_file(results_dir):
    """Test the file with the most successful URLs wins."""
    write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=3), "2025-01-01T00:00:00.000Z")
    best = write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=7, failed=3), "2025-01-02T00:00:00.000Z")
    write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=5), "2025-01-03T00:00:00.000Z")

    check = CompletionStore(results_dir).check("gpt-4o", 5)

    assert check.has_results
    assert check.filepath == best
    assert check.successful_count == 7
    assert check.total_count == 10


def test_below_threshold(results_dir):
    """Test insufficient results still report the best file."""
    path = write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=4), "2025-01-01T00:00:00.000Z")

    check = CompletionStore(results_dir).check("gpt-4o", 10)

    assert not check.has_results
    assert check.filepath == path
    assert check.record is not None
    assert "need 10" in check.message


def test_partial_and_other_models_ignored(results_dir):
    """Test partial files and other models' files are not candidates."""
    write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=9), "2025-01-01T00:00:00.000Z", partial=True)
    write_record(results_dir, "gpt-4o-mini", make_record("gpt-4o-mini", found=9), "2025-01-01T00:00:00.000Z")

    check = CompletionStore(results_dir).check("gpt-4o", 1)

    assert not check.has_results
    assert check.filepath is None


def test_failures_without_url_do_not_count(results_dir):
    write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=1, failed=9), "2025-01-01T00:00:00.000Z")
    check = CompletionStore(results_dir).check("gpt-4o", 2)
    assert check.successful_count == 1
    assert not check.has_results


def test_malformed_files_skipped(results_dir, caplog):
    """Test malformed files are skipped with a warning."""
    os.makedirs(results_dir)
    bad = os.path.join(results_dir, result_filename("gpt-4o", timestamp="2025-01-01T00:00:00.000Z"))
    with open(bad, "w") as f:
        f.write("{not json")
    good = write_record(results_dir, "gpt-4o", make_record("gpt-4o", found=2), "2025-01-02T00:00:00.000Z")

    check = CompletionStore(results_dir).check("gpt-4o", 2)

    assert check.has_results
    assert check.filepath == good
    assert "Error reading" in caplog.text


def test_only_malformed_files(results_dir):
    os.makedirs(results_dir)
    bad = os.path.join(results_dir, result_filename("gpt-4o", timestamp="2025-01-01T00:00:00.000Z"))
    with open(bad, "w") as f:
        json.dump({"metadata": {}, "results": "nope"}, f)

    check = CompletionStore(results_dir).check("gpt-4o", 1)

    assert not check.has_results
    assert "No valid results files" in check.message


def test_partial_status_round_trip(results_dir):
    record = make_record("gpt-4o", found=1)
    record.metadata.status = PARTIAL_STATUS
    path = CompletionStore(results_dir).save_run(record, partial=True)
    assert load_run(path).metadata.is_partial
