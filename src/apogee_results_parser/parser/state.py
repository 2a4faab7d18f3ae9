"""Shared parser state and common lifecycle helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from apogee_results_parser.labels import DEFAULT_LOCALE, LOCALES
from apogee_results_parser.models import ExtractionReport
from apogee_results_parser.parser.chain import Strategy, run_chain
from apogee_results_parser.parser.document import TranscriptDocument

logger = logging.getLogger(__name__)


@dataclass
class ReportDraft:
    """Mutable provenance collected while one parse runs."""

    requested_id: str
    is_markup: bool = True
    strategies: dict[str, str] = field(default_factory=dict)
    attempts: list[dict[str, object]] = field(default_factory=list)
    inferred_fields: list[str] = field(default_factory=list)
    defaulted_statuses: list[str] = field(default_factory=list)
    issues: list[dict[str, object]] = field(default_factory=list)

    def is_inferred(self, field_name: str) -> bool:
        return field_name in self.inferred_fields

    def freeze(self) -> ExtractionReport:
        return ExtractionReport(
            requested_id=self.requested_id,
            is_markup=self.is_markup,
            strategies=dict(self.strategies),
            attempts=tuple(dict(attempt) for attempt in self.attempts),
            inferred_fields=tuple(self.inferred_fields),
            defaulted_statuses=tuple(self.defaulted_statuses),
            issues=tuple(dict(issue) for issue in self.issues),
        )


class ParserStateMixin:
    """Per-run parser state, reset at the start of every parse."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        if locale not in LOCALES:
            raise ValueError(f"Unsupported locale {locale!r}; expected one of {', '.join(LOCALES)}")
        self.locale = locale
        self.doc: TranscriptDocument | None = None
        self.requested_id = ""
        self.fetched_at: datetime | None = None
        self.report = ReportDraft(requested_id="")

    def _reset(self, doc: TranscriptDocument, requested_id: str, fetched_at: datetime) -> None:
        self.doc = doc
        self.requested_id = requested_id
        self.fetched_at = fetched_at
        self.report = ReportDraft(requested_id=requested_id, is_markup=doc.is_markup)

    def _run_field(
        self,
        field_name: str,
        strategies: Sequence[Strategy],
        is_valid: Callable[[Any], bool] = bool,
        default: Optional[Callable[[], Any]] = None,
    ) -> Any:
        """Run one field's strategy chain, recording provenance; fall back to `default`."""
        if self.doc is None:
            raise RuntimeError(f"Cannot extract {field_name!r} before a document is loaded")
        outcome = run_chain(strategies, self.doc, is_valid)
        for name, ok in outcome.attempts:
            self.report.attempts.append({"field": field_name, "strategy": name, "matched": ok})

        if outcome.found:
            self.report.strategies[field_name] = outcome.strategy
            logger.debug("%s: extracted by %s", field_name, outcome.strategy)
            return outcome.value

        if default is None:
            logger.debug("%s: no strategy matched", field_name)
            return None

        value = default()
        self.report.strategies[field_name] = "default"
        self.report.inferred_fields.append(field_name)
        logger.info("%s: not found in document, inferred %r", field_name, value)
        return value
