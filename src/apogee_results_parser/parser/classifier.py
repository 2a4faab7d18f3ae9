"""Grade and status classification."""

from __future__ import annotations

from typing import Iterable, Optional

from apogee_results_parser.labels import STATUS_MARKERS
from apogee_results_parser.models import STATUS_FAILED, STATUS_PASSED
from apogee_results_parser.text_utils import fold

PASS_THRESHOLD = 10.0

SOURCE_MARKER = "marker"
SOURCE_GRADE = "grade"
SOURCE_DEFAULT = "default"


def match_status_marker(text: str = "", classes: Iterable[str] = ()) -> Optional[str]:
    """
    Return the status of the first explicit marker found, in priority order.

    Markers are checked as one ordered list (absences, then failure, then
    integration, then pass), so `NV` or `non validé` can never be read as a
    pass because they contain `V` or `validé`.
    """
    folded = fold(text or "")
    class_tokens = [c.lower() for c in classes]
    for marker in STATUS_MARKERS:
        if marker.kind == "code":
            if marker.pattern is not None and marker.pattern.search(text or ""):
                return marker.status
        elif marker.kind == "class":
            if any(marker.token in c for c in class_tokens):
                return marker.status
        elif marker.token in folded:
            return marker.status
    return None


def derive_status(grade: Optional[float], explicit: Optional[str]) -> tuple[str, str]:
    """
    Resolve the final status and where it came from.

    Explicit markers outrank the grade rule; with neither, the status falls
    back to a pass (kept for compatibility, reported as `default`).
    """
    if explicit is not None:
        return explicit, SOURCE_MARKER
    if grade is not None:
        return (STATUS_PASSED if grade >= PASS_THRESHOLD else STATUS_FAILED), SOURCE_GRADE
    return STATUS_PASSED, SOURCE_DEFAULT
