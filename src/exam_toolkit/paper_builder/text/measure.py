"""
Module: paper_builder.text.measure

Purpose:
    Measure and wrap text against a maximum line width using the
    standard PDF font metrics shipped with ReportLab.

Key Functions:
    - iter_lines(): Lazily wrap text into lines
    - wrap_text(): Wrap text into a list of lines
    - text_width(): Rendered width of a string (mm)
    - block_height(): Height of an N-line block (mm)

Key Classes:
    - TextStyle: Font size and face, passed explicitly to every call
    - MeasurementError: Degenerate width or font size

Dependencies:
    - reportlab.pdfbase.pdfmetrics: Standard font metrics

Used By:
    - paper_builder.layout.blocks: Height calculation and line placement
    - paper_builder.output.renderer: Baseline offsets

Guarantees:
    No returned line is wider than max_width. The same input always
    yields the same lines; there is no shared "current font".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence

from reportlab.pdfbase import pdfmetrics

PT_TO_MM = 25.4 / 72.0
LINE_HEIGHT_FACTOR = 1.15

# Width comparisons tolerate float noise from summing glyph widths
_WIDTH_EPSILON = 1e-9

_FACES = {
    # family: (regular, bold, italic, bold italic)
    "Helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "Times": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "Courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}


class MeasurementError(Exception):
    """Text cannot be measured or wrapped (fatal for the document)."""
    pass


@dataclass(frozen=True)
class TextStyle:
    """
    Font settings for one text run (immutable).

    Attributes:
        font_size: Size in points
        bold: Bold face
        italic: Italic (oblique) face
        family: "Helvetica", "Times", "Courier" or a symbol font
            name such as "ZapfDingbats" (no bold/italic variants)

    Example:
        >>> TextStyle(10, bold=True).font_name
        'Helvetica-Bold'
    """

    font_size: float
    bold: bool = False
    italic: bool = False
    family: str = "Helvetica"

    @property
    def font_name(self) -> str:
        """PDF base font name for this style."""
        faces = _FACES.get(self.family)
        if faces is None:
            return self.family
        return faces[(1 if self.bold else 0) + (2 if self.italic else 0)]

    @property
    def line_height(self) -> float:
        """Height of one line (mm)."""
        return self.font_size * LINE_HEIGHT_FACTOR * PT_TO_MM

    @property
    def ascent(self) -> float:
        """Distance from the top of a line box to the baseline (mm)."""
        return pdfmetrics.getAscent(self.font_name, self.font_size) * PT_TO_MM


def text_width(text: str, style: TextStyle) -> float:
    """
    Rendered width of a single-line string.

    Args:
        text: Text without newlines
        style: Font settings

    Returns:
        Width in millimetres
    """
    return pdfmetrics.stringWidth(text, style.font_name, style.font_size) * PT_TO_MM


def iter_lines(text: str, max_width: float, style: TextStyle) -> Iterator[str]:
    """
    Wrap text into lines no wider than max_width.

    Words are packed greedily. Explicit newlines always start a new
    line. A word wider than max_width is broken between characters.
    Arguments are checked eagerly; lines are produced lazily.

    Args:
        text: Text to wrap (may be empty)
        max_width: Maximum line width in mm
        style: Font settings used for measurement

    Returns:
        Iterator over wrapped lines. Empty or whitespace-only text
        produces no lines.

    Raises:
        MeasurementError: If max_width or the font size is not positive,
            or a single character is wider than max_width (raised
            while iterating)
    """
    if max_width <= 0:
        raise MeasurementError(f"max_width must be positive: {max_width}")
    if style.font_size <= 0:
        raise MeasurementError(f"font_size must be positive: {style.font_size}")
    if not text or not text.strip():
        return iter(())
    return _generate_lines(text, max_width, style)


def wrap_text(text: str, max_width: float, style: TextStyle) -> List[str]:
    """Wrap text into a list of lines. See iter_lines()."""
    return list(iter_lines(text, max_width, style))


def block_height(lines: Sequence[str] | int, style: TextStyle, leading: float = 0.0) -> float:
    """
    Height of a block of wrapped lines.

    Args:
        lines: Wrapped lines, or a line count
        style: Font settings
        leading: Block-specific extra space added below the lines (mm)

    Returns:
        N x line height + leading
    """
    count = lines if isinstance(lines, int) else len(lines)
    return count * style.line_height + leading


def _generate_lines(text: str, max_width: float, style: TextStyle) -> Iterator[str]:
    for paragraph in text.rstrip().split("\n"):
        yield from _wrap_paragraph(paragraph, max_width, style)


def _wrap_paragraph(paragraph: str, max_width: float, style: TextStyle) -> Iterator[str]:
    words = paragraph.split()
    if not words:
        yield ""
        return

    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if _fits(candidate, max_width, style):
            current = candidate
            continue

        if current:
            yield current
            current = ""

        if _fits(word, max_width, style):
            current = word
        else:
            pieces = _break_word(word, max_width, style)
            yield from pieces[:-1]
            current = pieces[-1]

    if current:
        yield current


def _break_word(word: str, max_width: float, style: TextStyle) -> List[str]:
    """Split an over-long word into pieces that each fit."""
    pieces: List[str] = []
    current = ""
    for char in word:
        if not _fits(char, max_width, style):
            raise MeasurementError(
                f"Character {char!r} is wider than max_width {max_width:.2f}mm "
                f"at {style.font_size}pt"
            )
        if _fits(current + char, max_width, style):
            current += char
        else:
            pieces.append(current)
            current = char
    pieces.append(current)
    return pieces


def _fits(text: str, max_width: float, style: TextStyle) -> bool:
    return text_width(text, style) <= max_width + _WIDTH_EPSILON
