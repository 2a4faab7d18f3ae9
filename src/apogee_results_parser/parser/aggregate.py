"""Aggregates (GPA, credits) and final record assembly."""

from __future__ import annotations

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from apogee_results_parser.models import (
    EARNING_STATUSES,
    AcademicTerm,
    ExtractionReport,
    ResultRecord,
    Subject,
)

# The transcript pages expose no per-subject credit weight; every subject
# counts for the same fixed amount. This is an approximation.
CREDITS_PER_SUBJECT = 4

GPA_QUANTUM = Decimal("0.01")

ID_SEPARATOR = "-"
ID_WHITESPACE_RE = re.compile(r"\s+")


def compute_gpa(subjects: Sequence[Subject]) -> float:
    """Mean of present grades, rounded half-up to 2 decimals; 0 when none is present."""
    grades = [s.grade for s in subjects if s.grade is not None]
    if not grades:
        return 0.0
    mean = Decimal(str(sum(grades) / len(grades)))
    return float(mean.quantize(GPA_QUANTUM, rounding=ROUND_HALF_UP))


def total_credits(subjects: Sequence[Subject]) -> int:
    return len(subjects) * CREDITS_PER_SUBJECT


def earned_credits(subjects: Sequence[Subject]) -> int:
    return sum(1 for s in subjects if s.status in EARNING_STATUSES) * CREDITS_PER_SUBJECT


def make_record_id(student_id: str, year: str, semester: str) -> str:
    """Deterministic record key; every whitespace run becomes a single `-`."""
    raw = ID_SEPARATOR.join(part.strip() for part in (student_id, year, semester))
    return ID_WHITESPACE_RE.sub(ID_SEPARATOR, raw)


def assemble_record(
    student_id: str,
    student_name: str,
    term: AcademicTerm,
    subjects: Sequence[Subject],
    fetched_at: datetime,
    report: ExtractionReport,
) -> ResultRecord:
    return ResultRecord(
        id=make_record_id(student_id, term.year, term.semester),
        student_id=student_id,
        student_name=student_name,
        term=term,
        subjects=tuple(subjects),
        gpa=compute_gpa(subjects),
        total_credits=total_credits(subjects),
        earned_credits=earned_credits(subjects),
        fetched_at=fetched_at,
        report=report,
    )
