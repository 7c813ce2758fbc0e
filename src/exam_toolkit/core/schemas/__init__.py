"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_document,
    validate_payload,
    ValidationError,
)

__all__ = [
    "validate_document",
    "validate_payload",
    "ValidationError",
]
