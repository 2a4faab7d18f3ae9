"""Tests for GPA, credits, record identifiers and post-extraction checks."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from apogee_results_parser import ResultRecord, extract
from apogee_results_parser.models import AcademicTerm, ExtractionReport, Subject
from apogee_results_parser.parser.aggregate import (
    CREDITS_PER_SUBJECT,
    assemble_record,
    compute_gpa,
    earned_credits,
    make_record_id,
    total_credits,
)
from apogee_results_parser.parser.engine import TranscriptParser


def _subject(name: str, grade: float | None, status: str) -> Subject:
    return Subject(name=name, grade=grade, status=status)


def test_compute_gpa_is_mean_of_present_grades() -> None:
    subjects = [_subject("Algèbre", 12.0, "V"), _subject("Analyse", 8.0, "NV"), _subject("Stage", None, "V")]

    assert compute_gpa(subjects) == 10.0


def test_compute_gpa_rounds_to_two_decimals() -> None:
    subjects = [_subject("A1 module", 10.0, "V"), _subject("A2 module", 10.0, "V"), _subject("A3 module", 11.0, "V")]

    assert compute_gpa(subjects) == 10.33


def test_compute_gpa_without_grades_is_zero() -> None:
    assert compute_gpa([]) == 0.0
    assert compute_gpa([_subject("Stage", None, "V")]) == 0.0


def test_credits_count_passed_and_integrated_subjects_only() -> None:
    subjects = [
        _subject("Droit Civil", 14.0, "V"),
        _subject("Droit Pénal", 9.0, "AC"),
        _subject("Droit Commercial", 6.0, "NV"),
        _subject("Procédure", None, "ABJ"),
        _subject("Sociologie", None, "ABI"),
    ]

    assert total_credits(subjects) == 5 * CREDITS_PER_SUBJECT
    assert earned_credits(subjects) == 2 * CREDITS_PER_SUBJECT


def test_make_record_id_is_deterministic_and_collapses_whitespace() -> None:
    first = make_record_id("12345678", "2023-2024", "Semestre   3")
    second = make_record_id(" 12345678 ", "2023-2024", "Semestre 3")

    assert first == "12345678-2023-2024-Semestre-3"
    assert first == second


def test_assemble_record_derives_aggregates() -> None:
    fetched_at = datetime(2024, 1, 5, tzinfo=timezone.utc)
    report = ExtractionReport(requested_id="12345678")
    record = assemble_record(
        student_id="12345678",
        student_name="SAID AHMED",
        term=AcademicTerm(year="2023-2024", semester="Semestre 1"),
        subjects=[_subject("Microéconomie", 12.0, "V"), _subject("Comptabilité", 8.0, "NV")],
        fetched_at=fetched_at,
        report=report,
    )

    assert record.id == "12345678-2023-2024-Semestre-1"
    assert record.gpa == 10.0
    assert record.total_credits == 8
    assert record.earned_credits == 4
    assert isinstance(record.subjects, tuple)
    assert record.report is report


def test_validate_reports_duplicates_and_missing_grades() -> None:
    parser = TranscriptParser()
    subjects = [_subject("Stage", None, "V"), _subject("STAGE", None, "V")]

    parser._validate(subjects)

    issue_types = [issue["type"] for issue in parser.report.issues]
    assert issue_types == ["duplicate_subject", "no_grades"]


def test_subjects_without_grades_or_markers_are_flagged() -> None:
    html = (
        "<html><body>"
        '<div class="card"><div class="card-header"><b>Stage de fin d\'études</b></div>'
        '<div class="card-body">En attente</div></div>'
        "</body></html>"
    )

    record = extract(html, "12345678", datetime(2024, 6, 1, tzinfo=timezone.utc))

    assert isinstance(record, ResultRecord)
    assert record.subjects[0].status == "V"
    assert record.subjects[0].grade is None
    assert record.gpa == 0.0
    assert record.report.defaulted_statuses == ("Stage de fin d'études",)
    assert [issue["type"] for issue in record.report.issues] == ["no_grades"]


def test_compute_gpa_rounds_exact_halves_up() -> None:
    assert compute_gpa([_subject("Algèbre", 12.25, "V"), _subject("Analyse", 12.0, "V")]) == 12.13
    assert compute_gpa([_subject("Algèbre", 14.5, "V"), _subject("Analyse", 14.75, "V")]) == 14.63


def test_record_report_is_frozen_after_assembly() -> None:
    html = "<html><body><table><tr><td>Statistiques</td><td>08</td></tr></table></body></html>"
    parser = TranscriptParser()

    first = parser.parse(html, "12345678", datetime(2024, 6, 1, tzinfo=timezone.utc))
    parser.parse(html, "87654321", datetime(2024, 6, 1, tzinfo=timezone.utc))

    assert isinstance(first, ResultRecord)
    assert isinstance(first.report.attempts, tuple)
    assert isinstance(first.report.inferred_fields, tuple)
    assert first.report.requested_id == "12345678"
    with pytest.raises(FrozenInstanceError):
        first.report.issues = ()


def test_field_extraction_requires_a_loaded_document() -> None:
    with pytest.raises(RuntimeError):
        TranscriptParser()._extract_term()
