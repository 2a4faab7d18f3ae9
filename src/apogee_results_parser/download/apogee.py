"""Transcript results page downloader."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

import requests

DEFAULT_URL_TEMPLATE = "https://e-apps.fsjes.uca.ma/scolarite/resultat/index.php?apogee={student_id}"
REQUEST_TIMEOUT = 30.0
MIN_STUDENT_ID_LENGTH = 5
MIN_CONTENT_LENGTH = 200
REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,ar;q=0.8,en-US;q=0.7,en;q=0.6",
}

STATUS_OK = "ok"
STATUS_INVALID_ID = "invalid_id"
STATUS_HTTP_ERROR = "http_error"
STATUS_NETWORK_ERROR = "network_error"
STATUS_CONTENT_TOO_SHORT = "content_too_short"
STATUS_WRITE_ERROR = "write_error"


@dataclass
class DownloadResult:
    """Structured downloader result for orchestration and observability."""

    ok: bool
    status: str
    error: str | None
    student_id: str
    url: str | None
    content: str | None
    fetched_at: datetime
    output_path: Path | None = None
    bytes_written: int = 0


def validate_student_id(student_id: str | None) -> str:
    """Return the trimmed identifier or raise ValueError when it is unusable."""
    value = (student_id or "").strip()
    if len(value) < MIN_STUDENT_ID_LENGTH:
        raise ValueError(
            f"Invalid student ID {student_id!r}: expected at least {MIN_STUDENT_ID_LENGTH} characters."
        )
    return value


def build_results_url(student_id: str, url_template: str = DEFAULT_URL_TEMPLATE) -> str:
    return url_template.format(student_id=quote(student_id, safe=""))


def download_results(
    student_id: str,
    output_path: Path | None = None,
    *,
    url_template: str = DEFAULT_URL_TEMPLATE,
    timeout: float = REQUEST_TIMEOUT,
) -> DownloadResult:
    """Fetch the results page for one student; failures are reported, never raised."""
    fetched_at = datetime.now(timezone.utc)
    try:
        student_id = validate_student_id(student_id)
    except ValueError as e:
        return DownloadResult(
            ok=False,
            status=STATUS_INVALID_ID,
            error=str(e),
            student_id=student_id or "",
            url=None,
            content=None,
            fetched_at=fetched_at,
            output_path=output_path,
        )

    url = build_results_url(student_id, url_template)
    print(f"Downloading: {url}")

    try:
        response = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        print(f"Error: {e}")
        return DownloadResult(
            ok=False,
            status=STATUS_NETWORK_ERROR,
            error=str(e),
            student_id=student_id,
            url=url,
            content=None,
            fetched_at=fetched_at,
            output_path=output_path,
        )

    if not response.ok:
        print(f"Response status: {response.status_code}")
        return DownloadResult(
            ok=False,
            status=STATUS_HTTP_ERROR,
            error=f"HTTP {response.status_code}",
            student_id=student_id,
            url=response.url or url,
            content=None,
            fetched_at=fetched_at,
            output_path=output_path,
        )

    content = response.text
    if len(content) < MIN_CONTENT_LENGTH:
        print("Warning: Page content seems too short")
        return DownloadResult(
            ok=False,
            status=STATUS_CONTENT_TOO_SHORT,
            error=f"Page content shorter than {MIN_CONTENT_LENGTH} characters.",
            student_id=student_id,
            url=response.url or url,
            content=content,
            fetched_at=fetched_at,
            output_path=output_path,
        )

    bytes_written = 0
    if output_path is not None:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            print(f"Error: {e}")
            return DownloadResult(
                ok=False,
                status=STATUS_WRITE_ERROR,
                error=str(e),
                student_id=student_id,
                url=response.url or url,
                content=content,
                fetched_at=fetched_at,
                output_path=output_path,
            )
        bytes_written = len(content.encode("utf-8"))
        print(f"Saved {bytes_written:,} bytes -> {output_path}")

    return DownloadResult(
        ok=True,
        status=STATUS_OK,
        error=None,
        student_id=student_id,
        url=response.url or url,
        content=content,
        fetched_at=fetched_at,
        output_path=output_path,
        bytes_written=bytes_written,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Download a student's results page")
    parser.add_argument("student_id", help="Student identifier (Apogée number)")
    parser.add_argument("--output-dir", "-o", default="downloads/results", help="Output directory")
    parser.add_argument("--url-template", default=DEFAULT_URL_TEMPLATE, help="URL with a {student_id} placeholder")
    parser.add_argument("--timeout", type=float, default=REQUEST_TIMEOUT, help="Request timeout in seconds")

    args = parser.parse_args()

    output_path = Path(args.output_dir) / f"{args.student_id.strip()}.html"
    result = download_results(
        args.student_id,
        output_path,
        url_template=args.url_template,
        timeout=args.timeout,
    )
    if not result.ok:
        print(f"Error: {result.status}: {result.error}")
    raise SystemExit(0 if result.ok else 1)


if __name__ == "__main__":
    main()
