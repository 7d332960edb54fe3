"""Cross-model HTML comparison report built from stored run files."""

import argparse
import html
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from brandfinder.config import settings
from brandfinder.console import console

logger = logging.getLogger(__name__)

SUMMARY_LABEL = "--- MODEL SUMMARY ---"
NOT_FOUND = "Not Found"


@dataclass
class ReportRow:
    """One table row: a brand result or a per-file summary."""

    model: str
    brand_name: str
    website_url: str
    confidence: str
    success: bool
    description: str = ""
    location: str = ""
    specialties: str = ""
    notes: str = ""
    token_cost: float = 0.0
    total_tokens: int = 0
    is_summary: bool = False

    @property
    def url_found(self) -> bool:
        return bool(self.website_url) and self.website_url != NOT_FOUND


@dataclass
class ModelStats:
    """Per-model aggregate over brand rows."""

    total_brands: int = 0
    found_urls: int = 0
    high_confidence: int = 0
    medium_confidence: int = 0
    low_confidence: int = 0
    total_cost: float = 0.0
    total_tokens: int = 0

    @property
    def found_rate(self) -> float:
        return self.found_urls / self.total_brands * 100 if self.total_brands else 0.0

    @property
    def average_cost(self) -> float:
        return self.total_cost / self.total_brands if self.total_brands else 0.0


def read_all_reports(results_dir: str) -> List[Dict[str, Any]]:
    """
    Load every JSON run file in the directory, partial runs included.

    Unreadable files and files without metadata/results are skipped with a warning.
    """
    if not os.path.isdir(results_dir):
        logger.warning(f"Results directory {results_dir} does not exist")
        return []

    reports = []
    for filename in sorted(os.listdir(results_dir)):
        if not filename.endswith(".json"):
            continue
        filepath = os.path.join(results_dir, filename)
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading file {filename}: {e}")
            continue

        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            logger.warning(f"Skipping {filename}: not a run record")
            continue
        if not isinstance(data.get("metadata"), dict):
            data["metadata"] = {}
        reports.append(data)

    return reports


def extract_model_name(metadata: Dict[str, Any]) -> str:
    return metadata.get("model_name") or metadata.get("model_used") or "Unknown Model"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def assemble_table_data(reports: List[Dict[str, Any]]) -> List[ReportRow]:
    """Flatten results into rows, with one summary row after each file's results."""
    rows: List[ReportRow] = []

    for report in reports:
        metadata = report["metadata"]
        model = extract_model_name(metadata)
        token_usage = metadata.get("token_usage") or {}

        for result in report["results"]:
            if not isinstance(result, dict):
                continue
            info = result.get("additional_info")
            info = info if isinstance(info, dict) else {}
            usage = result.get("token_usage")
            usage = usage if isinstance(usage, dict) else {}
            rows.append(
                ReportRow(
                    model=model,
                    brand_name=_text(result.get("brand_name")),
                    website_url=_text(result.get("website_url")) or NOT_FOUND,
                    confidence=_text(result.get("search_confidence")) or "unknown",
                    success=bool(result.get("success")),
                    description=_text(result.get("description")),
                    location=_text(info.get("location")) or "Unknown",
                    specialties=_text(info.get("specialties")),
                    notes=_text(result.get("notes")),
                    token_cost=float(usage.get("cost") or 0),
                    total_tokens=int(usage.get("total_tokens") or 0),
                )
            )

        total_cost = float(token_usage.get("total_cost_credits") or 0)
        rows.append(
            ReportRow(
                model=model,
                brand_name=SUMMARY_LABEL,
                website_url=(
                    f"{metadata.get('successful_searches', 0)}/"
                    f"{metadata.get('total_brands_processed', 0)} found"
                ),
                confidence=metadata.get("success_rate") or "0%",
                success=True,
                description=f"Total cost: {total_cost:.4f} credits",
                notes=f"Avg tokens per brand: {token_usage.get('average_tokens_per_brand', 0)}",
                token_cost=total_cost,
                total_tokens=int(token_usage.get("total_tokens") or 0),
                is_summary=True,
            )
        )

    return rows


HTML_HEAD = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Brand Website Search Results Analysis</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }
        .container { max-width: 1400px; margin: 0 auto; background-color: white; padding: 20px;
                     border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        h1 { color: #333; text-align: center; margin-bottom: 30px; }
        table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; vertical-align: top; }
        th { background-color: #f2f2f2; font-weight: bold; position: sticky; top: 0; }
        tr:nth-child(even) { background-color: #f9f9f9; }
        .summary-row { background-color: #e8f4f8 !important; font-weight: bold; }
        .confidence-high { background-color: #d4edda; color: #155724; }
        .confidence-medium { background-color: #fff3cd; color: #856404; }
        .confidence-low { background-color: #f8d7da; color: #721c24; }
        .url-found { color: #007bff; }
        .url-not-found { color: #dc3545; font-style: italic; }
        .model-name { font-weight: bold; color: #495057; }
        .description { max-width: 300px; word-wrap: break-word; }
        .notes { max-width: 250px; word-wrap: break-word; font-size: 0.9em; }
        .cost { text-align: right; font-family: monospace; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Brand Website Search Results Analysis</h1>
        <table>
            <thead>
                <tr>
                    <th>Model</th>
                    <th>Brand Name</th>
                    <th>Website URL</th>
                    <th>Confidence</th>
                    <th>Description</th>
                    <th>Location</th>
                    <th>Specialties</th>
                    <th>Notes</th>
                    <th>Token Cost</th>
                    <th>Total Tokens</th>
                </tr>
            </thead>
            <tbody>
"""

HTML_TAIL = """            </tbody>
        </table>
    </div>
</body>
</html>
"""


def confidence_class(confidence: str) -> str:
    if confidence == "high":
        return "confidence-high"
    if confidence == "medium":
        return "confidence-medium"
    return "confidence-low"


def render_row(row: ReportRow) -> str:
    e = html.escape
    row_class = "summary-row" if row.is_summary else ""
    url_class = "url-found" if row.url_found else "url-not-found"
    return f"""                <tr class="{row_class}">
                    <td class="model-name">{e(row.model)}</td>
                    <td>{e(row.brand_name)}</td>
                    <td class="{url_class}">{e(row.website_url)}</td>
                    <td class="{confidence_class(row.confidence)}">{e(row.confidence)}</td>
                    <td class="description">{e(row.description)}</td>
                    <td>{e(row.location)}</td>
                    <td>{e(row.specialties)}</td>
                    <td class="notes">{e(row.notes)}</td>
                    <td class="cost">{row.token_cost:.4f}</td>
                    <td class="cost">{row.total_tokens}</td>
                </tr>
"""


def generate_html_table(rows: List[ReportRow]) -> str:
    """Standalone HTML document with one results table."""
    return HTML_HEAD + "".join(render_row(row) for row in rows) + HTML_TAIL


def compute_model_stats(rows: List[ReportRow]) -> Dict[str, ModelStats]:
    """Aggregate brand rows per model; summary rows are ignored."""
    stats: Dict[str, ModelStats] = {}
    for row in rows:
        if row.is_summary:
            continue
        model = stats.setdefault(row.model, ModelStats())
        model.total_brands += 1
        if row.url_found:
            model.found_urls += 1
        if row.confidence == "high":
            model.high_confidence += 1
        elif row.confidence == "medium":
            model.medium_confidence += 1
        elif row.confidence == "low":
            model.low_confidence += 1
        model.total_cost += row.token_cost
        model.total_tokens += row.total_tokens
    return stats


def print_summary_stats(stats: Dict[str, ModelStats], out: Console = console) -> None:
    out.print("\n[bold]=== MODEL COMPARISON SUMMARY ===[/bold]\n")
    for model_name, s in stats.items():
        out.print(f"{escape(model_name)}:")
        out.print(f"  URLs Found: {s.found_urls}/{s.total_brands} ({s.found_rate:.1f}%)")
        out.print(f"  High Confidence: {s.high_confidence}")
        out.print(f"  Medium Confidence: {s.medium_confidence}")
        out.print(f"  Low Confidence: {s.low_confidence}")
        out.print(f"  Total Cost: {s.total_cost:.4f} credits")
        out.print(f"  Total Tokens: {s.total_tokens}")
        out.print(f"  Avg Cost per Brand: {s.average_cost:.4f} credits")
        out.print("")


def build_report(
    results_dir: str,
    html_path: str,
    data_path: Optional[str] = None,
    out: Console = console,
) -> List[ReportRow]:
    """
    Read run files, print per-model statistics and write the report files.

    Args:
        results_dir: Directory holding run JSON files
        html_path: Output path for the HTML report
        data_path: Optional output path for the assembled rows as JSON

    Returns:
        Assembled rows
    """
    out.print("Reading report files...")
    rows = assemble_table_data(read_all_reports(results_dir))
    out.print(f"Assembled data for {len(rows)} rows")

    print_summary_stats(compute_model_stats(rows), out=out)

    with open(html_path, "w", encoding="utf-8") as f:
        f.write(generate_html_table(rows))
    out.print(f"HTML report generated: {html_path}")

    if data_path:
        with open(data_path, "w", encoding="utf-8") as f:
            json.dump([asdict(row) for row in rows], f, indent=2, ensure_ascii=False)
        out.print(f"Raw data saved: {data_path}")

    return rows


def main(argv: Optional[List[str]] = None):
    """Entry point for the brandfinder-report command."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    parser = argparse.ArgumentParser(
        prog="brandfinder-report",
        description="Aggregate stored brand website results into an HTML comparison report",
    )
    parser.add_argument("--results-dir", default=settings.OUTPUT_DIR, help="Directory with run JSON files")
    parser.add_argument("--output", default="brand_analysis_report.html", help="HTML report path")
    parser.add_argument(
        "--data-output",
        default="assembled_data.json",
        help="Path for the assembled rows as JSON (empty string to skip)",
    )
    args = parser.parse_args(argv)

    try:
        build_report(args.results_dir, args.output, args.data_output or None)
    except OSError as e:
        logger.error(f"Failed to write report: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
