"""Downloader exports."""

from apogee_results_parser.download.apogee import (
    DownloadResult,
    build_results_url,
    download_results,
    main,
    validate_student_id,
)

__all__ = ["DownloadResult", "build_results_url", "download_results", "main", "validate_student_id"]
