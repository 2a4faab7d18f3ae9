"""Public package API for apogee-results-parser."""

from apogee_results_parser.api import JobResult, extract, fetch_and_extract, outcome_to_payload, parse_file
from apogee_results_parser.download.apogee import DownloadResult, download_results, validate_student_id
from apogee_results_parser.models import (
    AcademicTerm,
    ExtractionFailure,
    ExtractionReport,
    ResultRecord,
    StudentIdentity,
    Subject,
)
from apogee_results_parser.parser.engine import TranscriptParser
from apogee_results_parser.text_utils import normalize_subject_name, normalize_text, parse_grade

__all__ = [
    "TranscriptParser",
    "extract",
    "parse_file",
    "fetch_and_extract",
    "outcome_to_payload",
    "JobResult",
    "download_results",
    "validate_student_id",
    "DownloadResult",
    "AcademicTerm",
    "ExtractionFailure",
    "ExtractionReport",
    "ResultRecord",
    "StudentIdentity",
    "Subject",
    "normalize_subject_name",
    "normalize_text",
    "parse_grade",
]
