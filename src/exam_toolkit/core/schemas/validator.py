"""
Schema Validation Utilities

Validates question papers before any layout work starts.

Two entry points:
- `validate_payload()` checks raw JSON (the portal's export format)
  against `document.schema.json` using jsonschema.
- `validate_document()` checks a built Document for the conditions the
  layout engine cannot work around: missing header fields, no questions,
  non-positive marks, empty option sets.

Both fail fast with ValidationError. Nothing is retried.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..models.document import Document, QuestionKind


DOCUMENT_SCHEMA_NAME = "document"

# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when a document or payload is not printable."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_payload(data: dict[str, Any]) -> None:
    """
    Validate a raw paper payload against the document schema.

    Args:
        data: Dictionary decoded from JSON

    Raises:
        ValidationError: If the payload does not match the schema. All
            schema violations are listed in `errors`; `path` points at
            the first one.
    """
    schema = _load_schema(DOCUMENT_SCHEMA_NAME)
    validator = jsonschema.Draft7Validator(schema)
    problems = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if not problems:
        return

    first = problems[0]
    raise ValidationError(
        f"Schema validation failed: {first.message}",
        path=".".join(str(p) for p in first.absolute_path),
        errors=[
            f"{'.'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
            for e in problems
        ],
    )


def validate_document(document: Document) -> None:
    """
    Check that a Document can be laid out.

    Collects every problem before raising so the caller sees the full
    list at once.

    Args:
        document: Document to check

    Raises:
        ValidationError: If any required field is missing or invalid
    """
    errors: list[str] = []

    if not document.title or not document.title.strip():
        errors.append("title: Title is required")
    if not document.subject or not document.subject.strip():
        errors.append("subject: Subject is required")
    if not document.exam_type or not document.exam_type.strip():
        errors.append("exam_type: Exam type is required")
    if document.duration_minutes <= 0:
        errors.append(
            f"duration_minutes: Duration must be positive: {document.duration_minutes}"
        )
    if not document.questions:
        errors.append("questions: At least one question is required")

    for number, question in document.numbered():
        path = f"questions[{number - 1}]"
        if not question.text or not question.text.strip():
            errors.append(f"{path}.text: Question {number} has no text")
        if isinstance(question.marks, bool) or not isinstance(question.marks, int) or question.marks <= 0:
            errors.append(
                f"{path}.marks: Question {number} marks must be a positive integer: {question.marks!r}"
            )
        if question.kind is QuestionKind.MCQ and question.options is not None:
            if not question.options.options:
                errors.append(f"{path}.options: Question {number} has an empty option set")

    if errors:
        raise ValidationError(
            f"Document is not printable: {errors[0]}",
            path=errors[0].split(":", 1)[0],
            errors=errors,
        )
