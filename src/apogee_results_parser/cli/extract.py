"""CLI entrypoint for extracting one transcript results page."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from apogee_results_parser.api import extract, outcome_to_payload
from apogee_results_parser.download.apogee import validate_student_id
from apogee_results_parser.labels import DEFAULT_LOCALE, LOCALES
from apogee_results_parser.models import ResultRecord


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract a transcript results page to JSON")
    parser.add_argument("--input", "-i", required=True, help="Path to input HTML file")
    parser.add_argument("--student-id", "-s", required=True, help="Identifier the page was requested for")
    parser.add_argument("--out", "-o", help="Path to output JSON file (default: out/json/<student-id>.json)")
    parser.add_argument("--out-dir", default="out", help="Base output directory (default: out)")
    parser.add_argument("--locale", choices=LOCALES, default=DEFAULT_LOCALE, help="Locale for default labels")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log strategy decisions")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        raise SystemExit(1)

    try:
        student_id = validate_student_id(args.student_id)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    if args.out:
        output_path = Path(args.out)
    else:
        output_path = Path(args.out_dir) / "json" / f"{student_id}.json"

    with open(input_path, "r", encoding="utf-8", errors="replace") as f:
        html_content = f.read()

    outcome = extract(html_content, student_id, locale=args.locale)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(outcome_to_payload(outcome), f, ensure_ascii=False, indent=2)

    if not isinstance(outcome, ResultRecord):
        print(f"Extraction failed ({outcome.kind}): {outcome.message} -> {output_path}")
        raise SystemExit(1)

    print(f"Extracted {len(outcome.subjects)} subjects -> {output_path}")
    print("\nSummary:")
    print(f"  student: {outcome.student_name}")
    print(f"  term: {outcome.term.year} / {outcome.term.semester}")
    print(f"  gpa: {outcome.gpa:.2f}")
    print(f"  credits: {outcome.earned_credits}/{outcome.total_credits}")
    for field_name in outcome.report.inferred_fields:
        print(f"  inferred: {field_name}")


if __name__ == "__main__":
    main()
