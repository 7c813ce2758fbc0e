"""
Exam Toolkit Core Package

Shared data models, validation and serialization for question papers.

1. **Immutable Data Models**
   - Frozen dataclasses; the layout engine reads them but never mutates them

2. **Calculated Marks (Never Stored)**
   - `Document.total_marks` is always summed from the question blocks

3. **Fail-Fast Validation**
   - Payloads and documents are validated before any layout work
"""

from .models import Document, QuestionBlock, QuestionKind, OptionsBlock, OptionLayout, Option, ImageBlock
from .schemas import ValidationError, validate_document

__all__ = [
    "Document",
    "QuestionBlock",
    "QuestionKind",
    "OptionsBlock",
    "OptionLayout",
    "Option",
    "ImageBlock",
    "ValidationError",
    "validate_document",
]
