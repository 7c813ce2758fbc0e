"""
Serialization Utilities

Converts between the portal's question-paper payload (JSON) and Document.

The payload is the shape the exam portal exports:

    {
        "title": "...", "subject": "...", "examType": "...",
        "duration": 60, "institution": "...",
        "questions": [
            {"text": "...", "marks": 2, "type": "mcq",
             "mcqOptions": [{"text": "...", "isCorrect": true}],
             "mcqLayout": "grid", "showCorrectAnswer": false,
             "image": {"url": "data:image/png;base64,...", "caption": "..."}}
        ]
    }

snake_case spellings (exam_type, duration_minutes, kind, options, layout,
show_correct_answer, is_correct, source) are accepted as well.

Base64 image data URLs are decoded into ImageBlock.data on load, and
embedded bytes are written back with their detected MIME type.

total_marks is NOT read or written - it is always calculated on load.
"""

from __future__ import annotations

import base64
import binascii
import io
import json
from pathlib import Path
from typing import Any, Optional

from PIL import Image

from ..models.document import (
    Document,
    ImageBlock,
    Option,
    OptionLayout,
    OptionsBlock,
    QuestionBlock,
    QuestionKind,
)
from ..schemas.validator import validate_payload, ValidationError


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in data."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _option_from_dict(data: dict[str, Any]) -> Option:
    return Option(
        text=str(data.get("text", "")),
        is_correct=bool(_pick(data, "isCorrect", "is_correct", default=False)),
    )


def _image_from_dict(data: Optional[dict[str, Any]]) -> Optional[ImageBlock]:
    if not data:
        return None
    source = _pick(data, "url", "source")
    if not source:
        return None
    caption = data.get("caption") or None
    embedded = _decode_base64_image(source)
    if embedded is not None:
        return ImageBlock(data=embedded, caption=caption)
    return ImageBlock(source=source, caption=caption)


def _decode_base64_image(source: str) -> Optional[bytes]:
    """Bytes of a base64 image data URL; None for anything else or malformed data."""
    header, sep, payload = source.partition(",")
    if not (sep and header.startswith("data:image/") and header.endswith(";base64")):
        return None
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def _image_data_url(data: bytes) -> str:
    """Base64 data URL labelled with the image's real MIME type."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            mime = Image.MIME.get(img.format or "", "application/octet-stream")
    except (OSError, ValueError, SyntaxError):
        mime = "application/octet-stream"
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


def _question_from_dict(data: dict[str, Any], path: str) -> QuestionBlock:
    raw_kind = _pick(data, "type", "kind", default=QuestionKind.SHORT.value)
    try:
        kind = QuestionKind(raw_kind)
    except ValueError:
        raise ValidationError(f"Unknown question type: {raw_kind!r}", path=f"{path}.type")

    options = None
    raw_options = _pick(data, "mcqOptions", "options")
    if raw_options is not None:
        raw_layout = _pick(data, "mcqLayout", "layout", default=None) or OptionLayout.VERTICAL.value
        try:
            layout = OptionLayout(raw_layout)
        except ValueError:
            raise ValidationError(f"Unknown option layout: {raw_layout!r}", path=f"{path}.mcqLayout")
        options = OptionsBlock(
            options=tuple(_option_from_dict(o) for o in raw_options),
            layout=layout,
            show_correct_answer=bool(
                _pick(data, "showCorrectAnswer", "show_correct_answer", default=False)
            ),
        )

    return QuestionBlock(
        text=str(data.get("text", "")),
        marks=data.get("marks", 0),
        kind=kind,
        options=options,
        image=_image_from_dict(data.get("image")),
    )


def document_from_dict(data: dict[str, Any], *, validate: bool = True) -> Document:
    """
    Build a Document from a payload dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate against the schema first

    Returns:
        Document instance

    Raises:
        ValidationError: If validate=True and data is invalid, or if a
            question type / option layout is unknown
    """
    if validate:
        validate_payload(data)

    questions = tuple(
        _question_from_dict(q, f"questions[{i}]")
        for i, q in enumerate(data.get("questions", []))
    )
    return Document(
        title=str(data.get("title", "")),
        subject=str(data.get("subject", "")),
        exam_type=str(_pick(data, "examType", "exam_type", default="")),
        duration_minutes=_pick(data, "duration", "duration_minutes", default=0),
        questions=questions,
        institution=data.get("institution") or None,
    )


def document_to_dict(document: Document) -> dict[str, Any]:
    """
    Serialize a Document to the portal payload shape.

    Embedded image bytes are written as base64 data URLs.
    """
    questions = []
    for question in document.questions:
        entry: dict[str, Any] = {
            "text": question.text,
            "marks": question.marks,
            "type": question.kind.value,
        }
        if question.options is not None:
            entry["mcqOptions"] = [
                {"text": o.text, "isCorrect": o.is_correct} for o in question.options.options
            ]
            entry["mcqLayout"] = question.options.layout.value
            entry["showCorrectAnswer"] = question.options.show_correct_answer
        if question.image is not None:
            url = question.image.source
            if question.image.data is not None:
                url = _image_data_url(question.image.data)
            entry["image"] = {"url": url, "caption": question.image.caption or ""}
        questions.append(entry)

    payload: dict[str, Any] = {
        "title": document.title,
        "subject": document.subject,
        "examType": document.exam_type,
        "duration": document.duration_minutes,
        "questions": questions,
    }
    if document.institution:
        payload["institution"] = document.institution
    return payload


def load_document(path: Path, *, validate: bool = True) -> Document:
    """
    Load a Document from a JSON file.

    Args:
        path: Path to the payload JSON file
        validate: Whether to validate against the schema first

    Returns:
        Document instance

    Raises:
        FileNotFoundError: If path does not exist
        ValidationError: If the payload is invalid
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValidationError("Paper payload must be a JSON object", path="")
    return document_from_dict(data, validate=validate)
