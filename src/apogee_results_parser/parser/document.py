"""Read-only view over a raw transcript document."""

from __future__ import annotations

import re
import warnings
from typing import Iterator, Optional, Pattern, Union

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning
from bs4.builder import ParserRejectedMarkup

from apogee_results_parser.text_utils import normalize_text, own_text

MARKUP_TOKEN_RE = re.compile(r"<\s*/?\s*[A-Za-z][^>]*>")


class TranscriptDocument:
    """
    Structural and raw-text access to one document.

    When the input is not markup (or the tree builder rejects it), `soup` is
    None, every structural query returns nothing, and only the raw-text view
    remains usable.
    """

    def __init__(self, raw: str, soup: Optional[BeautifulSoup]):
        self.raw = raw
        self.soup = soup

    @classmethod
    def from_markup(cls, markup: Union[str, bytes, None]) -> "TranscriptDocument":
        if markup is None:
            return cls("", None)
        if isinstance(markup, bytes):
            raw = markup.decode("utf-8", errors="replace")
        else:
            raw = markup
        if not MARKUP_TOKEN_RE.search(raw):
            return cls(raw, None)
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
                soup = BeautifulSoup(raw, "lxml")
        except ParserRejectedMarkup:
            soup = None
        return cls(raw, soup)

    @property
    def is_markup(self) -> bool:
        return self.soup is not None

    @property
    def is_empty(self) -> bool:
        return not self.raw.strip()

    @property
    def text(self) -> str:
        """Visible text when the structure parsed, else the raw input."""
        if self.soup is None:
            return self.raw
        return self.soup.get_text(separator="\n")

    def find_all(self, name=None, class_=None, **attrs) -> list[Tag]:
        if self.soup is None:
            return []
        if class_ is not None:
            attrs["class_"] = class_
        return list(self.soup.find_all(name, **attrs))

    def find(self, name=None, class_=None, **attrs) -> Optional[Tag]:
        found = self.find_all(name, class_=class_, limit=1, **attrs)
        return found[0] if found else None

    @staticmethod
    def immediate_text(element: Tag) -> str:
        return own_text(element)

    @staticmethod
    def full_text(element: Tag) -> str:
        return normalize_text(element.get_text(separator=" "))

    @staticmethod
    def child_at(element: Tag, name, index: int) -> Optional[Tag]:
        """Descendant `name` element at position `index` (direct children first)."""
        children = element.find_all(name, recursive=False)
        if not children:
            children = element.find_all(name)
        if -len(children) <= index < len(children):
            return children[index]
        return None

    def search(self, pattern: Pattern[str], *, visible: bool = False) -> Optional[re.Match[str]]:
        return pattern.search(self.text if visible else self.raw)

    def finditer(self, pattern: Pattern[str], *, visible: bool = False) -> Iterator[re.Match[str]]:
        return pattern.finditer(self.text if visible else self.raw)
