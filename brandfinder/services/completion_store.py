"""Run record persistence and detection of sufficient prior results."""

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import ValidationError

from brandfinder.schemas.records import RunRecord, iso_timestamp

logger = logging.getLogger(__name__)

FILE_PREFIX = "brand_websites_"
PARTIAL_MARKER = "_PARTIAL_"

_UNSAFE_CHARS = re.compile(r'[/\\:*?"<>|]')
_RESULT_FILE = re.compile(
    r"^brand_websites_(?P<model>.+?)_(?P<partial>PARTIAL_)?"
    r"(?P<timestamp>\d{4}-\d{2}-\d{2}T[\d-]+Z)\.json$"
)


def sanitize_model_key(model_key: str) -> str:
    """Replace filesystem-unsafe characters with underscores."""
    return _UNSAFE_CHARS.sub("_", model_key)


def filename_timestamp(timestamp: Optional[str] = None) -> str:
    """ISO timestamp with ':' and '.' replaced by '-'."""
    return (timestamp or iso_timestamp()).replace(":", "-").replace(".", "-")


def result_filename(model_key: str, partial: bool = False, timestamp: Optional[str] = None) -> str:
    marker = "PARTIAL_" if partial else ""
    return f"{FILE_PREFIX}{sanitize_model_key(model_key)}_{marker}{filename_timestamp(timestamp)}.json"


def parse_result_filename(filename: str) -> Optional[Tuple[str, bool]]:
    """Return (sanitized model key, is_partial) or None for foreign files."""
    match = _RESULT_FILE.match(filename)
    if not match:
        return None
    return match.group("model"), match.group("partial") is not None


def load_run(filepath: str) -> RunRecord:
    """
    Load a persisted run record.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not a valid run record
    """
    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)
    return RunRecord.model_validate(data)


@dataclass
class CompletionCheck:
    """Outcome of a completion check."""

    has_results: bool
    message: str
    filepath: Optional[str] = None
    successful_count: int = 0
    total_count: int = 0
    record: Optional[RunRecord] = None


class CompletionStore:
    """Results directory: saves run records and finds the best prior run."""

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def ensure_output_dir(self) -> None:
        os.makedirs(self.output_dir, exist_ok=True)

    def save_run(self, record: RunRecord, partial: bool = False) -> str:
        """
        Write a run record as pretty-printed JSON.

        Args:
            record: Run record to persist
            partial: Insert the partial marker into the filename

        Returns:
            Path of the written file
        """
        self.ensure_output_dir()
        filepath = os.path.join(self.output_dir, result_filename(record.metadata.model_used, partial))
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(record.to_json_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved {len(record.results)} results to {filepath}")
        return filepath

    def candidate_files(self, model_key: str) -> List[str]:
        """Non-partial result files for a model, oldest first."""
        if not os.path.isdir(self.output_dir):
            return []

        safe_key = sanitize_model_key(model_key)
        candidates = []
        for filename in sorted(os.listdir(self.output_dir)):
            parsed = parse_result_filename(filename)
            if parsed is None:
                continue
            file_model, is_partial = parsed
            if file_model == safe_key and not is_partial:
                candidates.append(filename)
        return candidates

    def check(self, model_key: str, required_count: int) -> CompletionCheck:
        """
        Decide whether a prior run already has enough successful lookups.

        Args:
            model_key: Model key the runs were made with
            required_count: Minimum number of successful results with a URL

        Returns:
            CompletionCheck; the best file is reported even when insufficient
        """
        try:
            files = self.candidate_files(model_key)
        except OSError as e:
            logger.warning(f"Error checking existing results: {e}")
            return CompletionCheck(False, "Error reading existing results")

        if not files:
            return CompletionCheck(False, f"No existing results found for {model_key}")

        best_file = None
        best_record = None
        best_count = -1

        for filename in files:
            filepath = os.path.join(self.output_dir, filename)
            try:
                record = load_run(filepath)
            except (OSError, ValueError, ValidationError) as e:
                logger.warning(f"Error reading {filename}: {e}")
                continue

            count = len(record.qualifying_results())
            # Later (newer) files win ties
            if count >= best_count:
                best_count = count
                best_file = filepath
                best_record = record

        if best_record is None:
            return CompletionCheck(False, f"No valid results files found for {model_key}")

        logger.info(f"Best existing results for {model_key}: {os.path.basename(best_file)}")
        total = len(best_record.results)

        if best_count >= required_count:
            return CompletionCheck(
                True,
                f"Found existing results with {best_count} successful entries ({total} total)",
                filepath=best_file,
                successful_count=best_count,
                total_count=total,
                record=best_record,
            )

        return CompletionCheck(
            False,
            f"Best existing results only have {best_count} successful entries (need {required_count})",
            filepath=best_file,
            successful_count=best_count,
            total_count=total,
            record=best_record,
        )
