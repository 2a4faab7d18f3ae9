"""Validation mixin for extraction output integrity."""

from apogee_results_parser.text_utils import GRADE_MAX, GRADE_MIN


class ValidationMixin:
    """Mixin with post-extraction integrity checks."""

    def _validate(self, subjects) -> None:
        seen: set[str] = set()
        for subject in subjects:
            key = subject.name.casefold()
            if key in seen:
                self.report.issues.append({"type": "duplicate_subject", "name": subject.name})
            seen.add(key)
            if subject.grade is not None and not GRADE_MIN <= subject.grade <= GRADE_MAX:
                self.report.issues.append(
                    {"type": "grade_out_of_range", "name": subject.name, "grade": subject.grade}
                )

        if subjects and all(subject.grade is None for subject in subjects):
            # GPA will be the 0 sentinel, not a real average
            self.report.issues.append({"type": "no_grades", "subjects": len(subjects)})
