"""End-to-end extraction scenarios over inline results pages."""

from __future__ import annotations

from datetime import datetime, timezone

from apogee_results_parser import ExtractionFailure, ResultRecord, TranscriptParser, extract

FETCHED_AT = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


def _card(header: str, body: str, header_tag: str = "b") -> str:
    if header_tag:
        header = f"<{header_tag}>{header}</{header_tag}>"
    return (
        '<div class="card bg-light">'
        f'<div class="card-header">{header}</div>'
        f'<div class="card-body">{body}</div>'
        "</div>"
    )


def _cards_page() -> str:
    return (
        "<html><body>"
        '<div class="alert alert-dark">N°Apogée : 12345678 Filière : ECO<br>SAID AHMED&nbsp;</div>'
        "<h5>Année universitaire : 2023/2024</h5>"
        + _card(
            "S3.GR2 Économie Générale",
            "<table>"
            "<tr><td>Elément 1</td><td>12</td></tr>"
            '<tr class="text-success"><td>Résultat du module</td><td>14,5/20</td><td>Validé</td></tr>'
            "</table>",
        )
        + _card(
            "S3.GR2 Statistiques",
            "<table>"
            '<tr class="text-danger"><td>Résultat du module</td><td>11</td><td>Non validé</td></tr>'
            "</table>",
        )
        + "</body></html>"
    )


def test_card_page_extracts_full_record() -> None:
    record = extract(_cards_page(), "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.student_id == "12345678"
    assert record.student_name == "SAID AHMED"
    assert record.term.year == "2023/2024"
    assert record.term.semester == "Semestre 3"
    assert [(s.name, s.grade, s.status) for s in record.subjects] == [
        ("Économie Générale", 14.5, "V"),
        ("Statistiques", 11.0, "NV"),
    ]
    assert record.gpa == 12.75
    assert record.total_credits == 8
    assert record.earned_credits == 4
    assert record.id == "12345678-2023/2024-Semestre-3"
    assert record.fetched_at == FETCHED_AT


def test_card_page_provenance_names_winning_strategies() -> None:
    record = extract(_cards_page(), "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.report.strategies == {
        "student_name": "banner",
        "academic_year": "labeled_year",
        "semester": "group_code",
        "subjects": "cards",
    }
    assert record.report.inferred_fields == ()
    assert record.report.is_markup is True
    assert record.report.is_confident() is True


def test_card_with_success_badge() -> None:
    html = (
        "<html><body>"
        + _card(
            "Économie Générale",
            'Note : 14,5/20 <span class="badge badge-success">Validé</span>',
        )
        + "</body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert len(record.subjects) == 1
    subject = record.subjects[0]
    assert subject.name == "Économie Générale"
    assert subject.grade == 14.5
    assert subject.status == "V"


def test_two_cell_row_uses_grade_rule() -> None:
    html = (
        "<html><body><table>"
        "<tr><th>Module</th><th>Note</th></tr>"
        "<tr><td>Statistiques</td><td>08</td></tr>"
        "</table></body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.report.strategies["subjects"] == "table_rows"
    assert [(s.name, s.grade, s.status) for s in record.subjects] == [("Statistiques", 8.0, "NV")]
    assert record.gpa == 8.0
    assert record.earned_credits == 0


def test_page_without_subjects_is_a_typed_failure() -> None:
    html = "<html><body><p>Aucun résultat disponible pour le moment.</p></body></html>"

    outcome = extract(html, "12345678", FETCHED_AT)

    assert isinstance(outcome, ExtractionFailure)
    assert outcome.kind == "no_subjects_found"
    assert outcome.requested_id == "12345678"
    attempted = [a["strategy"] for a in outcome.report.attempts if a["field"] == "subjects"]
    assert attempted == ["cards", "table_rows", "raw_header_blocks", "plain_text_lines"]


def test_group_prefix_stripped_and_repeated_card_dropped() -> None:
    html = (
        "<html><body>"
        + _card(
            "S3.GR2 Droit Civil",
            'Note : 13/20 <span class="badge badge-success">V</span>',
        )
        + _card("S3.GR2 DROIT CIVIL", "Note : 13/20", header_tag="")
        + "</body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert [s.name for s in record.subjects] == ["Droit Civil"]
    assert record.subjects[0].status == "V"
    assert record.term.semester == "Semestre 3"


def test_explicit_failure_marker_outranks_passing_grade() -> None:
    html = (
        "<html><body><table>"
        "<tr><td>Comptabilité Générale</td><td>15</td><td>NV</td></tr>"
        "</table></body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.subjects[0].grade == 15.0
    assert record.subjects[0].status == "NV"


def test_out_of_range_grade_is_absent_not_clamped() -> None:
    html = (
        "<html><body><table>"
        "<tr><td>Droit Constitutionnel</td><td>25</td></tr>"
        "<tr><td>Histoire des idées</td><td>12</td></tr>"
        "</table></body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    grades = {s.name: s.grade for s in record.subjects}
    assert grades == {"Droit Constitutionnel": None, "Histoire des idées": 12.0}
    assert record.gpa == 12.0
    assert record.report.defaulted_statuses == ("Droit Constitutionnel",)


def test_raw_header_blocks_when_cards_are_not_structured() -> None:
    html = (
        '<html><body><div class="panel">'
        '<div class="card-header"><b>Microéconomie</b></div>'
        '<div>Note finale <strong>15,25</strong> /20 <span class="text-success">Validé</span></div>'
        "</div></body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.report.strategies["subjects"] == "raw_header_blocks"
    assert [(s.name, s.grade, s.status) for s in record.subjects] == [("Microéconomie", 15.25, "V")]


def test_cards_take_priority_over_table_rows() -> None:
    html = (
        "<html><body>"
        + _card("Finance d'entreprise", "Note : 9/20")
        + "<table><tr><td>Marketing Stratégique</td><td>16</td></tr></table>"
        + "</body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.report.strategies["subjects"] == "cards"
    assert [s.name for s in record.subjects] == ["Finance d'entreprise"]


def test_plain_text_document_uses_line_strategy() -> None:
    text = "Economie Generale : 14,5/20 Validé\nS3.GR2 Gestion : 07/20\nMoyenne : 10,75/20\n"

    record = extract(text, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.report.is_markup is False
    assert record.report.strategies["subjects"] == "plain_text_lines"
    assert [(s.name, s.grade, s.status) for s in record.subjects] == [
        ("Economie Generale", 14.5, "V"),
        ("Gestion", 7.0, "NV"),
    ]


def test_unparseable_input_is_malformed_document() -> None:
    for document in ("", "   ", "no markup and no grades here", None):
        outcome = extract(document, "12345678", FETCHED_AT)
        assert isinstance(outcome, ExtractionFailure)
        assert outcome.kind == "malformed_document"


def test_defaults_are_flagged_as_inferred() -> None:
    html = "<html><body><table><tr><td>Statistiques</td><td>08</td></tr></table></body></html>"

    record = extract(html, "12345678", datetime(2024, 10, 2, tzinfo=timezone.utc))

    assert isinstance(record, ResultRecord)
    assert record.term.year == "2024-2025"
    assert record.term.semester == "Semestre 1"
    assert "12345678" in record.student_name
    assert record.report.inferred_fields == ("student_name", "academic_year", "semester")
    assert record.report.is_inferred("academic_year") is True
    assert record.report.strategies["academic_year"] == "default"
    assert record.report.is_confident() is False


def test_subject_extraction_is_idempotent_across_runs() -> None:
    parser = TranscriptParser()

    first = parser.parse(_cards_page(), "12345678", FETCHED_AT)
    second = parser.parse(_cards_page(), "12345678", FETCHED_AT)

    assert isinstance(first, ResultRecord)
    assert isinstance(second, ResultRecord)
    assert first.subjects == second.subjects
    assert first.id == second.id
    assert len(second.report.attempts) == len(first.report.attempts)


def test_bytes_input_is_accepted() -> None:
    record = extract(_cards_page().encode("utf-8"), "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert record.subjects[0].name == "Économie Générale"


def test_summary_rows_are_not_subjects() -> None:
    html = (
        "<html><body><table>"
        "<tr><td>Statistiques</td><td>08</td></tr>"
        "<tr><td>Microéconomie</td><td>14</td></tr>"
        "<tr><td>Moyenne du semestre</td><td>11</td></tr>"
        "</table></body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert [s.name for s in record.subjects] == ["Statistiques", "Microéconomie"]
    assert record.total_credits == 8
    assert record.gpa == 11.0


def test_element_line_classes_do_not_decide_module_status() -> None:
    html = (
        "<html><body>"
        + _card(
            "Macroéconomie",
            '<div class="text-danger">Elément 1 : 08/20</div>'
            '<div class="text-success">Elément 2 : 16/20</div>'
            "<div>Moyenne module : 12/20</div>",
        )
        + "</body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert [(s.name, s.grade, s.status) for s in record.subjects] == [("Macroéconomie", 12.0, "V")]


def test_module_line_marker_still_outranks_grade() -> None:
    html = (
        "<html><body>"
        + _card(
            "Macroéconomie",
            '<div class="text-success">Elément 1 : 16/20</div>'
            '<div>Moyenne module : 12/20 <span class="badge badge-danger">Non validé</span></div>',
        )
        + "</body></html>"
    )

    record = extract(html, "12345678", FETCHED_AT)

    assert isinstance(record, ResultRecord)
    assert [(s.name, s.grade, s.status) for s in record.subjects] == [("Macroéconomie", 12.0, "NV")]
