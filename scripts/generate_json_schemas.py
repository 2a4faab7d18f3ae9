#!/usr/bin/env python3
"""Generate JSON Schema artifacts for `apogee-extract` output and extraction reports."""

from __future__ import annotations

import argparse
import json
import sys
import types
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Union, get_args, get_origin

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from apogee_results_parser.models import (  # noqa: E402
    AcademicTerm,
    ExtractionFailure,
    ExtractionReport,
    ResultRecord,
    Subject,
)

SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"
NULL_SCHEMA = {"type": "null"}
SCALAR_SCHEMAS: dict[Any, dict[str, Any]] = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number"},
    bool: {"type": "boolean"},
    datetime: {"type": "string", "format": "date-time"},
}
MODELS = (Subject, AcademicTerm, ExtractionReport, ResultRecord, ExtractionFailure)


class ModelSchemaBuilder:
    """Collects `$defs` for the transcript models reachable from a root model."""

    def __init__(self) -> None:
        self.defs: dict[str, dict[str, Any]] = {}

    def ref(self, model: type) -> dict[str, str]:
        if model.__name__ not in self.defs:
            self.defs[model.__name__] = self._object_schema(model)
        return {"$ref": f"#/$defs/{model.__name__}"}

    def _object_schema(self, model: type) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        for model_field in fields(model):
            # an explicit json_schema replaces the annotation-derived schema
            schema = dict(model_field.metadata.get("json_schema") or self.for_annotation(model_field.type))
            schema["description"] = model_field.metadata["description"]
            properties[model_field.name] = schema
        return {
            "title": model.__name__,
            "description": " ".join((model.__doc__ or "").split()),
            "type": "object",
            "additionalProperties": False,
            "properties": properties,
            "required": list(properties),
        }

    def for_annotation(self, annotation: Any) -> dict[str, Any]:
        if annotation in SCALAR_SCHEMAS:
            return dict(SCALAR_SCHEMAS[annotation])
        if annotation in MODELS:
            return self.ref(annotation)

        origin = get_origin(annotation)
        args = get_args(annotation)
        if origin in (Union, types.UnionType):
            options = [self.for_annotation(arg) for arg in args if arg is not type(None)]
            if type(None) in args:
                options.append(dict(NULL_SCHEMA))
            return options[0] if len(options) == 1 else {"anyOf": options}
        if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
            return {"type": "array", "items": self.for_annotation(args[0])}
        if origin is list:
            return {"type": "array", "items": self.for_annotation(args[0]) if args else {}}
        if origin is dict:
            return {"type": "object", "additionalProperties": self.for_annotation(args[1]) if args else {}}
        # object, Any
        return {}


def build_output_schema() -> dict[str, Any]:
    builder = ModelSchemaBuilder()
    record_ref = builder.ref(ResultRecord)
    failure_ref = builder.ref(ExtractionFailure)
    return {
        "$schema": SCHEMA_DRAFT,
        "title": "Transcript Extractor Output",
        "description": "JSON document printed by `apogee-extract`: exactly one of `record` and `failure` is set.",
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "record": {"description": "Extracted transcript record, or null when extraction failed."},
            "failure": {"description": "Typed extraction failure, or null when a record was produced."},
        },
        "required": ["record", "failure"],
        "oneOf": [
            {"properties": {"record": record_ref, "failure": NULL_SCHEMA}},
            {"properties": {"record": NULL_SCHEMA, "failure": failure_ref}},
        ],
        "$defs": builder.defs,
    }


def build_report_schema() -> dict[str, Any]:
    builder = ModelSchemaBuilder()
    return {
        "$schema": SCHEMA_DRAFT,
        "title": "Transcript Extraction Report",
        "description": "Per-run provenance: winning strategies, attempts, inferred fields and issues.",
        "$ref": builder.ref(ExtractionReport)["$ref"],
        "$defs": builder.defs,
    }


SCHEMA_BUILDERS: dict[str, Callable[[], dict[str, Any]]] = {
    "apogee-output.schema.json": build_output_schema,
    "apogee-report.schema.json": build_report_schema,
}


def render(name: str) -> str:
    return json.dumps(SCHEMA_BUILDERS[name](), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def stale_artifacts(out_dir: Path) -> list[str]:
    """Names of artifacts in `out_dir` that are missing or differ from a fresh render."""
    stale = []
    for name in sorted(SCHEMA_BUILDERS):
        path = out_dir / name
        if not path.exists() or path.read_text(encoding="utf-8") != render(name):
            stale.append(name)
    return stale


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate JSON Schemas for transcript extractor output.")
    parser.add_argument("--out-dir", type=Path, default=REPO_ROOT / "schemas", help="Artifact directory.")
    parser.add_argument("--check", action="store_true", help="Fail when artifacts are missing or outdated.")
    args = parser.parse_args(argv)
    out_dir = args.out_dir.resolve()

    if args.check:
        stale = stale_artifacts(out_dir)
        if stale:
            print(f"Schema artifacts out of date: {', '.join(stale)}")
            print("Regenerate with: python3 scripts/generate_json_schemas.py")
            return 1
        print(f"Schema artifacts are up to date in {out_dir}.")
        return 0

    out_dir.mkdir(parents=True, exist_ok=True)
    for name in SCHEMA_BUILDERS:
        (out_dir / name).write_text(render(name), encoding="utf-8")
    print(f"Generated {len(SCHEMA_BUILDERS)} schema artifacts in {out_dir}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
