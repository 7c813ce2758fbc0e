"""
Module: paper_builder.text

Purpose:
    Text measurement and line wrapping with explicit font styles.

Key Functions:
    - iter_lines(), wrap_text(): Wrap text to a width
    - text_width(), block_height(): Measurements in mm

Key Classes:
    - TextStyle: Font settings
    - MeasurementError: Degenerate measurement request

Dependencies:
    - reportlab: Standard font metrics
"""

from .measure import (
    TextStyle,
    MeasurementError,
    iter_lines,
    wrap_text,
    text_width,
    block_height,
    PT_TO_MM,
)

__all__ = [
    "TextStyle",
    "MeasurementError",
    "iter_lines",
    "wrap_text",
    "text_width",
    "block_height",
    "PT_TO_MM",
]
