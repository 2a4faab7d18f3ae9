"""Student identity extraction strategies."""

from __future__ import annotations

import re
from typing import Optional

from apogee_results_parser.labels import BANNER_MARKERS, NAME_CELL_LABELS, student_placeholder
from apogee_results_parser.models import StudentIdentity
from apogee_results_parser.parser.chain import Strategy
from apogee_results_parser.parser.document import TranscriptDocument
from apogee_results_parser.text_utils import fold, strip_entities

BANNER_CLASS_RE = re.compile(r"^(?:alert|banner)")
BANNER_MARKER_RE = re.compile(
    r"(?:" + "|".join(re.escape(m) for m in BANNER_MARKERS) + r")\s*:\s*",
    re.IGNORECASE,
)
BANNER_DELIMITERS = ("\xa0", "\n", "|", "N°")
RAW_NAME_PATTERNS = (
    re.compile(
        r"N°\s*Apog[ée]e\s*:\s*\d+[^<]*?Fili[èe]re\s*:\s*[^\s<]+\s*(?:<br[^>]*>)?\s*([^<&\n]+)",
        re.IGNORECASE,
    ),
    re.compile(
        r"(?<![\w])(?:Nom(?:\s+et\s+pr[ée]noms?)?|Name)\s*:\s*(?:<[^>]+>\s*)*([^<&\n:]+)",
        re.IGNORECASE,
    ),
)


def is_valid_name(value: str) -> bool:
    return len(strip_entities(value)) > 2


def name_after_banner_marker(text: str) -> Optional[str]:
    """
    Return the name that follows `Filière: <code>` in a banner text.

    The first token after the marker is the programme code; the name runs
    from the next token up to the first delimiter.
    """
    m = BANNER_MARKER_RE.search(text)
    if not m:
        return None
    rest = text[m.end():].lstrip()
    parts = rest.split(maxsplit=1)
    if len(parts) < 2:
        return None
    tail = parts[1].lstrip()
    for delimiter in BANNER_DELIMITERS:
        idx = tail.find(delimiter)
        if idx != -1:
            tail = tail[:idx]
    return strip_entities(tail) or None


class IdentityExtractorMixin:
    """Mixin resolving the student display name."""

    def _identity_strategies(self) -> list[Strategy]:
        return [
            Strategy("name_cell", self._name_from_label_cell),
            Strategy("banner", self._name_from_banner),
            Strategy("raw_pattern", self._name_from_raw_pattern),
        ]

    def _extract_identity(self) -> StudentIdentity:
        name = self._run_field(
            "student_name",
            self._identity_strategies(),
            is_valid=is_valid_name,
            default=lambda: student_placeholder(self.requested_id, self.locale),
        )
        return StudentIdentity(display_name=strip_entities(name))

    @staticmethod
    def _name_from_label_cell(doc: TranscriptDocument) -> Optional[str]:
        for cell in doc.find_all(["td", "th"]):
            label = fold(doc.immediate_text(cell) or doc.full_text(cell)).rstrip(" :")
            if label not in NAME_CELL_LABELS:
                continue
            sibling = cell.find_next_sibling(["td", "th"])
            if sibling is None:
                continue
            value = strip_entities(doc.full_text(sibling))
            if value:
                return value
        return None

    @staticmethod
    def _name_from_banner(doc: TranscriptDocument) -> Optional[str]:
        for banner in doc.find_all(class_=BANNER_CLASS_RE):
            name = name_after_banner_marker(banner.get_text(separator="\n"))
            if name:
                return name
        return None

    @staticmethod
    def _name_from_raw_pattern(doc: TranscriptDocument) -> Optional[str]:
        for pattern in RAW_NAME_PATTERNS:
            m = doc.search(pattern)
            if m:
                value = strip_entities(m.group(1))
                if value:
                    return value
        return None
