"""Tests for the results page downloader with a mocked HTTP layer."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import requests

from apogee_results_parser.download import apogee

PAGE = "<html><body>" + ("<p>résultats</p>" * 40) + "</body></html>"


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200, url: str | None = None):
        self.text = text
        self.status_code = status_code
        self.url = url
        self.ok = status_code < 400


def _install_fake_get(monkeypatch, response: _FakeResponse | None = None, error: Exception | None = None) -> dict:
    calls: dict = {}

    def _fake_get(url, headers, timeout, allow_redirects):
        calls["url"] = url
        calls["headers"] = headers
        calls["timeout"] = timeout
        calls["allow_redirects"] = allow_redirects
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(apogee.requests, "get", _fake_get)
    return calls


def test_validate_student_id_trims_and_rejects_short_values() -> None:
    assert apogee.validate_student_id("  12345678 ") == "12345678"
    for bad in ("", "   ", "1234", None):
        with pytest.raises(ValueError):
            apogee.validate_student_id(bad)


def test_build_results_url_quotes_identifier() -> None:
    assert apogee.build_results_url("12345678").endswith("index.php?apogee=12345678")
    assert apogee.build_results_url("12 34/5", "https://x.test/{student_id}") == "https://x.test/12%2034%2F5"


def test_download_results_saves_page(monkeypatch, tmp_path: Path) -> None:
    calls = _install_fake_get(monkeypatch, _FakeResponse(PAGE, url="https://final.test/page"))
    output_path = tmp_path / "nested" / "12345678.html"

    result = apogee.download_results(" 12345678 ", output_path, timeout=5.0)

    assert result.ok is True
    assert result.status == apogee.STATUS_OK
    assert result.student_id == "12345678"
    assert result.url == "https://final.test/page"
    assert result.content == PAGE
    assert result.fetched_at.tzinfo is not None
    assert output_path.read_text(encoding="utf-8") == PAGE
    assert result.bytes_written == len(PAGE.encode("utf-8"))
    assert calls["timeout"] == 5.0
    assert calls["allow_redirects"] is True
    assert "User-Agent" in calls["headers"]
    assert calls["url"].endswith("apogee=12345678")


def test_download_results_without_output_path_keeps_content_only(monkeypatch) -> None:
    _install_fake_get(monkeypatch, _FakeResponse(PAGE))

    result = apogee.download_results("12345678")

    assert result.ok is True
    assert result.output_path is None
    assert result.bytes_written == 0
    assert result.url == apogee.build_results_url("12345678")


def test_download_results_rejects_invalid_id_without_request(monkeypatch) -> None:
    calls = _install_fake_get(monkeypatch, _FakeResponse(PAGE))

    result = apogee.download_results("123")

    assert result.ok is False
    assert result.status == apogee.STATUS_INVALID_ID
    assert calls == {}


def test_download_results_reports_network_errors(monkeypatch) -> None:
    _install_fake_get(monkeypatch, error=requests.ConnectionError("connection refused"))

    result = apogee.download_results("12345678")

    assert result.ok is False
    assert result.status == apogee.STATUS_NETWORK_ERROR
    assert "connection refused" in (result.error or "")


def test_download_results_reports_http_errors(monkeypatch) -> None:
    _install_fake_get(monkeypatch, _FakeResponse("Server error", status_code=503))

    result = apogee.download_results("12345678")

    assert result.ok is False
    assert result.status == apogee.STATUS_HTTP_ERROR
    assert result.error == "HTTP 503"


def test_download_results_flags_short_pages(monkeypatch) -> None:
    _install_fake_get(monkeypatch, _FakeResponse("<html></html>"))

    result = apogee.download_results("12345678")

    assert result.ok is False
    assert result.status == apogee.STATUS_CONTENT_TOO_SHORT
    assert result.content == "<html></html>"


def test_main_exits_1_on_failure(monkeypatch, tmp_path: Path) -> None:
    _install_fake_get(monkeypatch, _FakeResponse("Server error", status_code=500))
    monkeypatch.setattr(sys, "argv", ["apogee-download", "12345678", "--output-dir", str(tmp_path)])

    with pytest.raises(SystemExit) as exc:
        apogee.main()

    assert exc.value.code == 1
    assert not (tmp_path / "12345678.html").exists()


def test_main_exits_0_and_writes_page(monkeypatch, tmp_path: Path) -> None:
    _install_fake_get(monkeypatch, _FakeResponse(PAGE))
    monkeypatch.setattr(sys, "argv", ["apogee-download", "12345678", "--output-dir", str(tmp_path)])

    with pytest.raises(SystemExit) as exc:
        apogee.main()

    assert exc.value.code == 0
    assert (tmp_path / "12345678.html").read_text(encoding="utf-8") == PAGE
