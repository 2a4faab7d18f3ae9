"""Label and status-marker lookup tables consulted by the extractors.

Textual entries are stored folded: lower-case, accents removed, single spaces.
Adding a locale means adding entries here, not touching the extractors.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern

from apogee_results_parser.models import (
    STATUS_FAILED,
    STATUS_JUSTIFIED_ABSENCE,
    STATUS_PASSED,
    STATUS_PASSED_BY_INTEGRATION,
    STATUS_UNJUSTIFIED_ABSENCE,
)

DEFAULT_LOCALE = "fr"
LOCALES = ("fr", "en", "ar")

SEMESTER_LABELS = {"fr": "Semestre", "en": "Semester", "ar": "الفصل"}
STUDENT_PLACEHOLDERS = {"fr": "Étudiant", "en": "Student", "ar": "طالب"}

NAME_CELL_LABELS = (
    "nom",
    "nom et prenom",
    "nom et prenoms",
    "nom complet",
    "name",
    "full name",
    "student name",
    "الاسم",
    "الاسم الكامل",
)
IDENTITY_LABELS = NAME_CELL_LABELS + (
    "prenom",
    "apogee",
    "n°apogee",
    "code apogee",
    "cne",
    "filiere",
    "date de naissance",
)
HEADER_WORDS = ("module", "matiere", "note", "statut")
RESULT_ROW_LABELS = ("resultat", "result", "نتيجة الوحدة")
SUMMARY_WORDS = ("moyenne", "total", "average", "المعدل")
BANNER_MARKERS = ("Filière", "Filiere", "المسلك")
YEAR_LABELS = (r"Ann[ée]e\s+universitaire", r"Academic\s+year", r"السنة\s+الجامعية")
SEMESTER_WORDS = (r"Semestre", r"Semester", r"الفصل")

# Negative and more specific outcomes come first: "non validé" contains "validé",
# "NV" contains "V".
STATUS_PRIORITY = (
    STATUS_UNJUSTIFIED_ABSENCE,
    STATUS_JUSTIFIED_ABSENCE,
    STATUS_FAILED,
    STATUS_PASSED_BY_INTEGRATION,
    STATUS_PASSED,
)

STATUS_TOKENS: dict[str, dict[str, tuple[str, ...]]] = {
    "fr": {
        STATUS_UNJUSTIFIED_ABSENCE: ("absence non justifiee", "absent non justifie", "abs. non justifiee"),
        STATUS_JUSTIFIED_ABSENCE: ("absence justifiee", "absent justifie", "abs. justifiee"),
        STATUS_FAILED: ("non validee", "non valide", "non acquis", "non admis", "ajourne"),
        STATUS_PASSED_BY_INTEGRATION: (
            "validee par compensation",
            "valide par compensation",
            "acquis par compensation",
            "compense",
        ),
        STATUS_PASSED: ("validee", "valide", "acquis", "admis"),
    },
    "ar": {
        STATUS_UNJUSTIFIED_ABSENCE: ("غياب غير مبرر",),
        STATUS_JUSTIFIED_ABSENCE: ("غياب مبرر",),
        STATUS_FAILED: ("غير مستوفاة", "غير مستوفى"),
        STATUS_PASSED_BY_INTEGRATION: ("مستوفاة بالمعاوضة", "مستوفاة بالتعويض"),
        STATUS_PASSED: ("مستوفاة", "مستوفى"),
    },
    "en": {
        STATUS_UNJUSTIFIED_ABSENCE: ("unjustified absence", "unexcused absence"),
        STATUS_JUSTIFIED_ABSENCE: ("justified absence", "excused absence"),
        STATUS_FAILED: ("not validated", "not passed", "failed"),
        STATUS_PASSED_BY_INTEGRATION: ("passed by compensation", "validated by compensation"),
        STATUS_PASSED: ("validated", "passed"),
    },
}

CLASS_HINTS = {
    STATUS_FAILED: ("danger",),
    STATUS_PASSED: ("success",),
}

SHORT_CODES = {
    STATUS_UNJUSTIFIED_ABSENCE: "ABI",
    STATUS_JUSTIFIED_ABSENCE: "ABJ",
    STATUS_FAILED: "NV",
    STATUS_PASSED_BY_INTEGRATION: "AC",
    STATUS_PASSED: "V",
}


@dataclass(frozen=True)
class StatusMarker:
    """One explicit in-document signal for a subject outcome."""

    status: str
    kind: str
    token: str
    pattern: Optional[Pattern[str]] = None


def _build_status_markers() -> tuple[StatusMarker, ...]:
    markers: list[StatusMarker] = []
    for status in STATUS_PRIORITY:
        code = SHORT_CODES[status]
        markers.append(
            StatusMarker(status, "code", code, re.compile(rf"(?<![A-Za-z0-9]){code}(?![A-Za-z0-9])"))
        )
        for hint in CLASS_HINTS.get(status, ()):
            markers.append(StatusMarker(status, "class", hint))
        for locale in LOCALES:
            for token in STATUS_TOKENS[locale].get(status, ()):
                markers.append(StatusMarker(status, "text", token))
    return tuple(markers)


STATUS_MARKERS = _build_status_markers()


def semester_label(locale: str) -> str:
    return SEMESTER_LABELS.get(locale, SEMESTER_LABELS[DEFAULT_LOCALE])


def student_placeholder(requested_id: str, locale: str) -> str:
    """Unknown-identity marker; always contains the requested identifier."""
    prefix = STUDENT_PLACEHOLDERS.get(locale, STUDENT_PLACEHOLDERS[DEFAULT_LOCALE])
    return f"{prefix} {requested_id}".strip()
