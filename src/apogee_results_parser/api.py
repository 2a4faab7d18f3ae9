"""High-level library API for single-document fetch and extract workflows."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

from apogee_results_parser.download.apogee import (
    DEFAULT_URL_TEMPLATE,
    REQUEST_TIMEOUT,
    DownloadResult,
    download_results,
    validate_student_id,
)
from apogee_results_parser.labels import DEFAULT_LOCALE
from apogee_results_parser.models import ExtractionFailure, ResultRecord
from apogee_results_parser.parser.engine import TranscriptParser

Outcome = Union[ResultRecord, ExtractionFailure]

__all__ = [
    "JobResult",
    "Outcome",
    "extract",
    "fetch_and_extract",
    "outcome_to_payload",
    "parse_file",
    "validate_student_id",
]


@dataclass
class JobResult:
    """Outcome of a single download + extract job."""

    download: DownloadResult
    outcome: Outcome | None
    parse_error: str | None = None


def extract(
    document: Union[str, bytes, None],
    requested_id: str,
    fetch_timestamp: datetime | None = None,
    *,
    locale: str = DEFAULT_LOCALE,
) -> Outcome:
    """Extract one record (or a typed failure) from a results page."""
    if fetch_timestamp is None:
        fetch_timestamp = datetime.now(timezone.utc)
    return TranscriptParser(locale=locale).parse(document, requested_id, fetch_timestamp)


def parse_file(
    input_path: str | Path,
    requested_id: str,
    *,
    fetch_timestamp: datetime | None = None,
    locale: str = DEFAULT_LOCALE,
) -> Outcome:
    """Extract from an HTML file on disk."""
    path = Path(input_path)
    html_content = path.read_text(encoding="utf-8", errors="replace")
    return extract(html_content, requested_id, fetch_timestamp, locale=locale)


def fetch_and_extract(
    student_id: str,
    output_path: str | Path | None = None,
    *,
    locale: str = DEFAULT_LOCALE,
    url_template: str = DEFAULT_URL_TEMPLATE,
    timeout: float = REQUEST_TIMEOUT,
) -> JobResult:
    """Run download and extraction for a single student."""
    path = Path(output_path) if output_path is not None else None
    download_result = download_results(student_id, path, url_template=url_template, timeout=timeout)
    if not download_result.ok:
        return JobResult(download=download_result, outcome=None)

    try:
        outcome = extract(
            download_result.content,
            download_result.student_id,
            download_result.fetched_at,
            locale=locale,
        )
    except Exception as e:
        return JobResult(download=download_result, outcome=None, parse_error=str(e))
    return JobResult(download=download_result, outcome=outcome)


def outcome_to_payload(outcome: Outcome) -> dict[str, Any]:
    """JSON-ready payload: exactly one of `record` / `failure` is set."""
    if isinstance(outcome, ResultRecord):
        record = asdict(outcome)
        record["subjects"] = list(record["subjects"])
        record["fetched_at"] = outcome.fetched_at.isoformat()
        return {"record": record, "failure": None}
    return {"record": None, "failure": asdict(outcome)}
