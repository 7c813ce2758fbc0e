"""
Utilities Package

Serialization helpers for question-paper payloads.
"""

from .serialization import (
    document_from_dict,
    document_to_dict,
    load_document,
)

__all__ = [
    "document_from_dict",
    "document_to_dict",
    "load_document",
]
