"""Subject table extraction: card, table-row and raw-text strategies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import Comment, NavigableString, Tag

from apogee_results_parser.labels import HEADER_WORDS, IDENTITY_LABELS, RESULT_ROW_LABELS, SUMMARY_WORDS
from apogee_results_parser.models import Subject
from apogee_results_parser.parser.chain import Strategy
from apogee_results_parser.parser.classifier import derive_status, match_status_marker
from apogee_results_parser.parser.document import TranscriptDocument
from apogee_results_parser.text_utils import (
    element_classes,
    fold,
    is_grade_like,
    NUMBER_TOKEN_RE,
    last_out_of_20,
    normalize_subject_name,
    normalize_text,
    parse_grade,
    strip_group_prefix,
    strip_tags,
)

CARD_MIN_NAME_LENGTH = 3
TABLE_MIN_NAME_LENGTH = 4
BLOCK_TAGS = ("tr", "li", "p", "div")
MODULE_LINE_WORDS = RESULT_ROW_LABELS + SUMMARY_WORDS

HEADER_BLOCK_RE = re.compile(
    r"<(?P<tag>div|h[1-6]|span|p)\b[^>]*class=[\"'][^\"']*card-header[^\"']*[\"'][^>]*>"
    r"(?P<header>.*?)</(?P=tag)\s*>",
    re.IGNORECASE | re.DOTALL,
)
CLASS_ATTR_RE = re.compile(r"class=[\"']([^\"']*)[\"']", re.IGNORECASE)
PLAIN_LINE_RE = re.compile(
    r"^[ \t]*(?P<name>[^\n:|]{3,}?)[ \t]*[:|\-–]?[ \t]*(?P<grade>-?\d+(?:[.,]\d+)?)[ \t]*/[ \t]*20\b(?P<rest>[^\n]*)$",
    re.MULTILINE,
)


@dataclass(frozen=True)
class SubjectEntry:
    subject: Subject
    status_source: str


class SubjectCollector:
    """
    Normalizes names and drops repeats for one strategy run.

    The first occurrence of a case-insensitive name wins.
    """

    def __init__(self, min_name_length: int):
        self.min_name_length = min_name_length
        self.entries: list[SubjectEntry] = []
        self._seen: set[str] = set()

    def add(self, raw_label: str, grade: Optional[float], explicit_status: Optional[str]) -> bool:
        name = normalize_subject_name(raw_label)
        if len(name) < self.min_name_length:
            return False
        key = name.casefold()
        if key in self._seen:
            return False
        self._seen.add(key)
        status, source = derive_status(grade, explicit_status)
        self.entries.append(SubjectEntry(Subject(name=name, grade=grade, status=status), source))
        return True


def is_label_row(name_text: str) -> bool:
    folded = fold(strip_group_prefix(name_text)).rstrip(" :")
    if folded in IDENTITY_LABELS:
        return True
    return any(word in folded for word in HEADER_WORDS + SUMMARY_WORDS)


def is_element_line(doc: TranscriptDocument, element: Tag) -> bool:
    """
    A block carrying one component's own grade inside a module card.

    Blocks that mention the module result or average are not element lines.
    """
    if element.name not in BLOCK_TAGS:
        return False
    text = doc.full_text(element)
    if not NUMBER_TOKEN_RE.search(text):
        return False
    folded = fold(text)
    return not any(word in folded for word in MODULE_LINE_WORDS)


def module_level_signals(doc: TranscriptDocument, roots: list[Tag]) -> tuple[str, list[str]]:
    """Text and class tokens of `roots`, skipping element lines and everything inside them."""
    texts: list[str] = []
    classes: list[str] = []

    def _walk(node: Tag) -> None:
        classes.extend(c.lower() for c in node.get("class", []) or [])
        for child in node.children:
            if isinstance(child, Tag):
                if not is_element_line(doc, child):
                    _walk(child)
            elif isinstance(child, NavigableString) and not isinstance(child, Comment):
                texts.append(str(child))

    for root in roots:
        _walk(root)
    return normalize_text(" ".join(texts)), classes


class SubjectTableMixin:
    """Mixin extracting the subject list with ordered, non-merging strategies."""

    def _subject_strategies(self) -> list[Strategy]:
        return [
            Strategy("cards", self._subjects_from_cards),
            Strategy("table_rows", self._subjects_from_table_rows),
            Strategy("raw_header_blocks", self._subjects_from_raw_header_blocks),
            Strategy("plain_text_lines", self._subjects_from_plain_lines),
        ]

    def _extract_subjects(self) -> Optional[list[SubjectEntry]]:
        return self._run_field("subjects", self._subject_strategies())

    @classmethod
    def _subjects_from_cards(cls, doc: TranscriptDocument) -> Optional[list[SubjectEntry]]:
        collector = SubjectCollector(CARD_MIN_NAME_LENGTH)
        for card in doc.find_all(class_="card"):
            header = card.find(class_="card-header")
            if header is None:
                continue
            emphasis = doc.child_at(header, ["b", "strong"], 0)
            label = doc.full_text(emphasis if emphasis is not None else header)
            grade, explicit = cls._card_outcome(doc, card, header)
            collector.add(label, grade, explicit)
        return collector.entries or None

    @staticmethod
    def _card_outcome(doc: TranscriptDocument, card: Tag, header: Tag) -> tuple[Optional[float], Optional[str]]:
        result_row = None
        for row in card.find_all("tr"):
            row_text = fold(doc.full_text(row))
            if any(label in row_text for label in RESULT_ROW_LABELS):
                result_row = row

        grade: Optional[float] = None
        explicit: Optional[str] = None
        if result_row is not None:
            for cell in result_row.find_all("td"):
                cell_text = doc.full_text(cell)
                if is_grade_like(cell_text):
                    candidate = parse_grade(cell_text)
                    if candidate is not None:
                        grade = candidate
            explicit = match_status_marker(doc.full_text(result_row), element_classes(result_row))

        body = card.find(class_="card-body")
        if body is not None:
            parts = [body]
        else:
            parts = [child for child in card.find_all(True, recursive=False) if child is not header]

        if grade is None:
            grade = last_out_of_20(" ".join(doc.full_text(part) for part in parts))
        if explicit is None:
            # element lines do not decide the module status
            module_text, module_classes = module_level_signals(doc, parts)
            explicit = match_status_marker(module_text, module_classes)
        return grade, explicit

    @staticmethod
    def _subjects_from_table_rows(doc: TranscriptDocument) -> Optional[list[SubjectEntry]]:
        collector = SubjectCollector(TABLE_MIN_NAME_LENGTH)
        for row in doc.find_all("tr"):
            cells = row.find_all("td", recursive=False)
            if len(cells) not in (2, 3):
                continue
            name_text = doc.full_text(cells[0])
            if not name_text or is_label_row(name_text):
                continue

            grade_text = doc.full_text(cells[1])
            grade_like = not grade_text or is_grade_like(grade_text)
            if len(cells) == 3:
                status_text = doc.full_text(cells[2])
            else:
                status_text = "" if grade_like else grade_text
            explicit = match_status_marker(status_text, element_classes(row))
            if not grade_like and explicit is None:
                continue

            collector.add(name_text, parse_grade(grade_text), explicit)
        return collector.entries or None

    @staticmethod
    def _subjects_from_raw_header_blocks(doc: TranscriptDocument) -> Optional[list[SubjectEntry]]:
        collector = SubjectCollector(CARD_MIN_NAME_LENGTH)
        headers = list(doc.finditer(HEADER_BLOCK_RE))
        for idx, m in enumerate(headers):
            end = headers[idx + 1].start() if idx + 1 < len(headers) else len(doc.raw)
            body = doc.raw[m.end():end]
            classes = [c for attr in CLASS_ATTR_RE.findall(body) for c in attr.split()]
            explicit = match_status_marker(strip_tags(body), classes)
            collector.add(strip_tags(m.group("header")), last_out_of_20(body), explicit)
        return collector.entries or None

    @staticmethod
    def _subjects_from_plain_lines(doc: TranscriptDocument) -> Optional[list[SubjectEntry]]:
        if doc.is_markup:
            return None
        collector = SubjectCollector(CARD_MIN_NAME_LENGTH)
        for m in doc.finditer(PLAIN_LINE_RE):
            name = m.group("name")
            if any(word in fold(name) for word in SUMMARY_WORDS):
                continue
            explicit = match_status_marker(m.group("rest"))
            collector.add(name, parse_grade(m.group("grade")), explicit)
        return collector.entries or None
