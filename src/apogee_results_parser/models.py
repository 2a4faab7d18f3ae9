"""Core data models for extracted transcript records and extraction provenance."""

from dataclasses import MISSING, dataclass, field
from datetime import datetime
from typing import Any, Optional

STATUS_PASSED = "V"
STATUS_FAILED = "NV"
STATUS_PASSED_BY_INTEGRATION = "AC"
STATUS_JUSTIFIED_ABSENCE = "ABJ"
STATUS_UNJUSTIFIED_ABSENCE = "ABI"

STATUS_VALUES = (
    STATUS_PASSED,
    STATUS_FAILED,
    STATUS_PASSED_BY_INTEGRATION,
    STATUS_JUSTIFIED_ABSENCE,
    STATUS_UNJUSTIFIED_ABSENCE,
)
EARNING_STATUSES = frozenset({STATUS_PASSED, STATUS_PASSED_BY_INTEGRATION})

FAILURE_NO_SUBJECTS = "no_subjects_found"
FAILURE_MALFORMED_DOCUMENT = "malformed_document"


def schema_field(
    description: str,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    json_schema: dict[str, Any] | None = None,
) -> Any:
    """Create a dataclass field with reusable JSON Schema metadata."""

    metadata: dict[str, Any] = {"description": description}
    if json_schema is not None:
        metadata["json_schema"] = json_schema

    kwargs: dict[str, Any] = {"metadata": metadata}
    if default is not MISSING:
        kwargs["default"] = default
    if default_factory is not MISSING:
        kwargs["default_factory"] = default_factory
    return field(**kwargs)


@dataclass(frozen=True)
class Subject:
    """One graded (or pending) course unit of a term."""

    name: str = schema_field(
        "Normalized subject name with any semester/group prefix removed.",
        json_schema={"type": "string", "minLength": 3},
    )
    grade: Optional[float] = schema_field(
        "Grade out of 20, or null when absent or out of the [0, 20] range.",
        json_schema={"anyOf": [{"type": "number", "minimum": 0, "maximum": 20}, {"type": "null"}]},
    )
    status: str = schema_field(
        "Outcome code: V (passed), NV (failed), AC (passed by integration), "
        "ABJ (justified absence), ABI (unjustified absence).",
        json_schema={"enum": list(STATUS_VALUES)},
    )


@dataclass(frozen=True)
class AcademicTerm:
    """Academic year and semester a transcript page refers to."""

    year: str = schema_field(
        "Academic year in `YYYY-YYYY` or `YYYY/YYYY` form.",
        json_schema={"type": "string", "pattern": "^[0-9]{4}[-/][0-9]{4}$"},
    )
    semester: str = schema_field("Semester label rendered in the extraction locale, e.g. `Semestre 3`.")


@dataclass(frozen=True)
class StudentIdentity:
    """Displayable identity of the student the page belongs to."""

    display_name: str = schema_field(
        "Extracted student name, or a placeholder containing the requested identifier.",
    )


@dataclass(frozen=True)
class ExtractionReport:
    """
    Provenance of one extraction run: which strategy produced each field.

    Built once per run from the parser's draft; sequences are tuples.
    """

    requested_id: str = schema_field("Identifier the document was requested for.")
    is_markup: bool = schema_field(
        default=True,
        description="False when the input could not be read as markup and only raw-text strategies ran.",
    )
    strategies: dict[str, str] = schema_field(
        default_factory=dict,
        description="Winning strategy name per field (`student_name`, `academic_year`, `semester`, `subjects`).",
    )
    attempts: tuple[dict[str, object], ...] = schema_field(
        default=(),
        description="Every strategy attempt in priority order with its outcome.",
    )
    inferred_fields: tuple[str, ...] = schema_field(
        default=(),
        description="Fields filled with a derived default instead of an extracted value.",
    )
    defaulted_statuses: tuple[str, ...] = schema_field(
        default=(),
        description="Subjects whose status fell back to the conservative `V` default (no marker, no grade).",
    )
    issues: tuple[dict[str, object], ...] = schema_field(
        default=(),
        description="Integrity issues detected after extraction.",
    )

    def is_inferred(self, field_name: str) -> bool:
        return field_name in self.inferred_fields

    def is_confident(self) -> bool:
        return not self.inferred_fields and not self.defaulted_statuses and not self.issues


@dataclass(frozen=True)
class ResultRecord:
    """Assembled transcript record for one student and term."""

    id: str = schema_field("Deterministic identifier derived from student id, year and semester.")
    student_id: str = schema_field("Identifier the document was requested for.")
    student_name: str = schema_field("Student display name (or unknown-identity placeholder).")
    term: AcademicTerm = schema_field("Academic year and semester.")
    subjects: tuple[Subject, ...] = schema_field("Deduplicated subjects in document order.")
    gpa: float = schema_field(
        "Mean of present grades rounded to 2 decimals; 0 when no grade is present.",
        json_schema={"type": "number", "minimum": 0, "maximum": 20},
    )
    total_credits: int = schema_field(
        "Subject count times a fixed per-subject weight (approximation, not an official credit count).",
    )
    earned_credits: int = schema_field("Passed (V/AC) subject count times the same fixed weight.")
    fetched_at: datetime = schema_field("Timestamp of the extraction run.")
    report: ExtractionReport = schema_field("Extraction provenance for this record.")


@dataclass(frozen=True)
class ExtractionFailure:
    """Typed outcome for a run that produced no usable subject list."""

    kind: str = schema_field(
        "Failure family.",
        json_schema={"enum": [FAILURE_NO_SUBJECTS, FAILURE_MALFORMED_DOCUMENT]},
    )
    message: str = schema_field("Human-readable failure description.")
    requested_id: str = schema_field("Identifier the document was requested for.")
    report: ExtractionReport = schema_field("Extraction provenance up to the failure.")
