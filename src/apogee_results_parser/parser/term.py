"""Academic term (year and semester) extraction strategies."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from apogee_results_parser.labels import SEMESTER_WORDS, YEAR_LABELS, semester_label
from apogee_results_parser.models import AcademicTerm
from apogee_results_parser.parser.chain import Strategy
from apogee_results_parser.parser.document import TranscriptDocument

YEAR_BODY = r"((?:19|20)\d{2})\s*([-/])\s*((?:19|20)\d{2})"
LABELED_YEAR_RE = re.compile(
    r"(?:" + "|".join(YEAR_LABELS) + r")\s*:?\s*(?:<[^>]+>\s*)*" + YEAR_BODY,
    re.IGNORECASE,
)
ANY_YEAR_RE = re.compile(r"(?<!\d)" + YEAR_BODY + r"(?!\d)")

GROUP_CODE_RE = re.compile(r"(?<![A-Za-z0-9])S(\d{1,2})\s*\.\s*GR?\s*\d+", re.IGNORECASE)
SEMESTER_WORD_RE = re.compile(r"(?:" + "|".join(SEMESTER_WORDS) + r")\s*(\d{1,2})(?!\d)", re.IGNORECASE)
BARE_SEMESTER_RE = re.compile(r"(?<![A-Za-z0-9])S\s?(\d{1,2})(?![A-Za-z0-9])")

SEPTEMBER = 9


def academic_year_for(moment: datetime) -> str:
    """Academic year containing `moment`; a new year starts in September."""
    if moment.month >= SEPTEMBER:
        return f"{moment.year}-{moment.year + 1}"
    return f"{moment.year - 1}-{moment.year}"


def _format_year(m: re.Match[str]) -> str:
    return f"{m.group(1)}{m.group(2)}{m.group(3)}"


class TermExtractorMixin:
    """Mixin resolving the academic year and semester."""

    def _year_strategies(self) -> list[Strategy]:
        return [
            Strategy("labeled_year", self._year_after_label),
            Strategy("any_year", self._year_anywhere),
        ]

    def _semester_strategies(self) -> list[Strategy]:
        return [
            Strategy("group_code", lambda doc: self._semester_from(doc, GROUP_CODE_RE)),
            Strategy("semester_word", lambda doc: self._semester_from(doc, SEMESTER_WORD_RE)),
            Strategy("bare_code", lambda doc: self._semester_from(doc, BARE_SEMESTER_RE)),
        ]

    def _extract_term(self) -> AcademicTerm:
        year = self._run_field(
            "academic_year",
            self._year_strategies(),
            default=lambda: academic_year_for(self.fetched_at),
        )
        semester = self._run_field(
            "semester",
            self._semester_strategies(),
            default=lambda: f"{semester_label(self.locale)} 1",
        )
        return AcademicTerm(year=year, semester=semester)

    @staticmethod
    def _year_after_label(doc: TranscriptDocument) -> Optional[str]:
        m = doc.search(LABELED_YEAR_RE)
        return _format_year(m) if m else None

    @staticmethod
    def _year_anywhere(doc: TranscriptDocument) -> Optional[str]:
        m = doc.search(ANY_YEAR_RE)
        return _format_year(m) if m else None

    def _semester_from(self, doc: TranscriptDocument, pattern: re.Pattern[str]) -> Optional[str]:
        m = doc.search(pattern, visible=True)
        if not m:
            return None
        return f"{semester_label(self.locale)} {int(m.group(1))}"
