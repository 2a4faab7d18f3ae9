"""Parser engine that orchestrates the full extraction pipeline."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Union

from apogee_results_parser.models import (
    FAILURE_MALFORMED_DOCUMENT,
    FAILURE_NO_SUBJECTS,
    ExtractionFailure,
    ResultRecord,
)
from apogee_results_parser.parser.aggregate import assemble_record
from apogee_results_parser.parser.classifier import SOURCE_DEFAULT
from apogee_results_parser.parser.document import TranscriptDocument
from apogee_results_parser.parser.identity import IdentityExtractorMixin
from apogee_results_parser.parser.state import ParserStateMixin
from apogee_results_parser.parser.subjects import SubjectTableMixin
from apogee_results_parser.parser.term import TermExtractorMixin
from apogee_results_parser.parser.validation import ValidationMixin

logger = logging.getLogger(__name__)

Outcome = Union[ResultRecord, ExtractionFailure]


class TranscriptParser(
    IdentityExtractorMixin,
    TermExtractorMixin,
    SubjectTableMixin,
    ValidationMixin,
    ParserStateMixin,
):
    """Parser for university transcript result pages."""

    def parse(
        self,
        document: Union[str, bytes, None],
        requested_id: str,
        fetched_at: datetime,
    ) -> Outcome:
        doc = TranscriptDocument.from_markup(document)
        self._reset(doc, requested_id, fetched_at)

        identity = self._extract_identity()
        term = self._extract_term()
        entries = self._extract_subjects()

        if not entries:
            return self._failure(doc)

        subjects = [entry.subject for entry in entries]
        self.report.defaulted_statuses.extend(
            entry.subject.name for entry in entries if entry.status_source == SOURCE_DEFAULT
        )
        self._validate(subjects)
        logger.debug("%s: %d subjects via %s", requested_id, len(subjects), self.report.strategies["subjects"])

        return assemble_record(
            student_id=requested_id,
            student_name=identity.display_name,
            term=term,
            subjects=subjects,
            fetched_at=fetched_at,
            report=self.report.freeze(),
        )

    def _failure(self, doc: TranscriptDocument) -> ExtractionFailure:
        if doc.is_empty or not doc.is_markup:
            kind = FAILURE_MALFORMED_DOCUMENT
            message = "Document is not readable markup and no raw-text strategy found subjects."
        else:
            kind = FAILURE_NO_SUBJECTS
            message = "No subject table, card or raw subject pattern was found in the document."
        logger.info("%s: extraction failed (%s)", self.requested_id, kind)
        return ExtractionFailure(
            kind=kind,
            message=message,
            requested_id=self.requested_id,
            report=self.report.freeze(),
        )
