"""Text and HTML utility helpers shared across the extractors."""

import html
import re
import unicodedata
from typing import Optional

from bs4 import Comment, NavigableString, Tag

GRADE_MIN = 0.0
GRADE_MAX = 20.0

WHITESPACE_RE = re.compile(r"\s+")
ENTITY_ARTIFACT_RE = re.compile(r"&(?:nbsp|#160|#xa0);?", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]*>")
GROUP_PREFIX_RE = re.compile(r"^\s*S\d+\s*\.\s*GR?\s*\d+\s*[-:–]?\s*", re.IGNORECASE)
NUMBER_TOKEN_RE = re.compile(r"-?\d+(?:[.,]\d+)?")
GRADE_CELL_RE = re.compile(r"^\s*-?\d+(?:[.,]\d+)?\s*(?:/\s*20)?\s*$")
OUT_OF_20_RE = re.compile(r"(-?\d+(?:[.,]\d+)?)\s*(?:<[^>]*>\s*)*/\s*20\b")


def normalize_text(text: str) -> str:
    """Normalize whitespace and trim."""
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def strip_entities(text: str) -> str:
    """Resolve HTML entities, including double-escaped `&nbsp;` artifacts, then normalize."""
    text = ENTITY_ARTIFACT_RE.sub(" ", text)
    text = html.unescape(text).replace("\xa0", " ")
    return normalize_text(text)


def strip_tags(fragment: str) -> str:
    return strip_entities(TAG_RE.sub(" ", fragment))


def fold(text: str) -> str:
    """Case- and accent-insensitive form used for label and marker lookups."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return normalize_text(stripped.casefold())


def strip_group_prefix(label: str) -> str:
    """Remove a leading semester/group code such as `S3.GR2`."""
    return GROUP_PREFIX_RE.sub("", label, count=1)


def normalize_subject_name(raw: str) -> str:
    return strip_entities(strip_group_prefix(strip_entities(raw)))


def parse_grade(text: str) -> Optional[float]:
    """
    Parse the first numeric token of text as a grade out of 20.

    Both `.` and `,` are accepted as decimal separator. Values outside
    [0, 20] are rejected, never clamped.
    """
    if not text:
        return None
    m = NUMBER_TOKEN_RE.search(text)
    if not m:
        return None
    value = float(m.group(0).replace(",", "."))
    if value < GRADE_MIN or value > GRADE_MAX:
        return None
    return value


def is_grade_like(text: str) -> bool:
    return bool(GRADE_CELL_RE.match(text or ""))


def last_out_of_20(text: str) -> Optional[float]:
    """Return the last `N/20` value of text (markup between number and slash allowed)."""
    matches = OUT_OF_20_RE.findall(text or "")
    if not matches:
        return None
    return parse_grade(matches[-1])


def own_text(element: Tag) -> str:
    """Text of the element's direct string children only."""
    parts = [
        str(child)
        for child in element.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ]
    return strip_entities(" ".join(parts))


def element_classes(element: Tag) -> list[str]:
    """Class tokens of element and all its descendants, lower-cased."""
    classes = [c.lower() for c in element.get("class", []) or []]
    for descendant in element.find_all(True):
        classes.extend(c.lower() for c in descendant.get("class", []) or [])
    return classes
