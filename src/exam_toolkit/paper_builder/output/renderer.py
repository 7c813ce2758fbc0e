"""
Module: paper_builder.output.renderer

Purpose:
    Render LayoutResult to PDF using ReportLab.
    Each PagePlan becomes one PDF page with its primitives drawn at
    their layout positions.

Key Functions:
    - render_to_pdf(): LayoutResult -> PDF bytes
    - write_pdf(): Render and save to a file

Dependencies:
    - reportlab: PDF generation
    - paper_builder.layout.models: LayoutResult, PagePlan

Used By:
    - paper_builder.controller: Pipeline orchestration
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..config import LayoutConfig
from ..layout.models import ImagePlacement, LayoutResult, PagePlan, Primitive, RuleLine, TextRun

logger = logging.getLogger(__name__)


def render_to_pdf(
    layout: LayoutResult,
    config: LayoutConfig,
    *,
    title: Optional[str] = None,
    subject: Optional[str] = None,
) -> bytes:
    """
    Render layout result to PDF bytes.

    Args:
        layout: Finalized layout from compose_paper()
        config: Layout configuration (page size)
        title: PDF document title metadata
        subject: PDF document subject metadata

    Returns:
        Complete PDF file contents

    Example:
        >>> pdf = render_to_pdf(layout, LayoutConfig(), title="Unit Test 1")
        >>> pdf[:5]
        b'%PDF-'
    """
    if layout.page_count == 0:
        logger.warning("Empty layout, creating empty PDF")

    page_width_pt = _mm_to_pt(config.page_width)
    page_height_pt = _mm_to_pt(config.page_height)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_width_pt, page_height_pt))
    if title:
        c.setTitle(title)
    if subject:
        c.setSubject(subject)
    c.setCreator("exam_toolkit")

    for page in layout.pages:
        _render_page(c, page, page_height_pt)
        c.showPage()

    c.save()
    data = buf.getvalue()

    logger.info(f"Rendered {layout.page_count} pages ({len(data)} bytes)")
    return data


def write_pdf(
    layout: LayoutResult,
    output_path: Path,
    config: LayoutConfig,
    *,
    title: Optional[str] = None,
    subject: Optional[str] = None,
) -> Path:
    """
    Render layout result to a PDF file.

    Raises:
        OSError: If the file cannot be written
    """
    data = render_to_pdf(layout, config, title=title, subject=subject)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    logger.info(f"Wrote {output_path}")
    return output_path


def _render_page(c: canvas.Canvas, page: PagePlan, page_height_pt: float) -> None:
    """Draw one page's body primitives, then its footer."""
    for primitive in page.primitives:
        _draw_primitive(c, primitive, page_height_pt)
    if page.footer is not None:
        _draw_text(c, page.footer, page_height_pt)


def _draw_primitive(c: canvas.Canvas, primitive: Primitive, page_height_pt: float) -> None:
    if isinstance(primitive, TextRun):
        _draw_text(c, primitive, page_height_pt)
    elif isinstance(primitive, ImagePlacement):
        _draw_image(c, primitive, page_height_pt)
    elif isinstance(primitive, RuleLine):
        _draw_rule(c, primitive, page_height_pt)
    else:
        raise TypeError(f"Unknown primitive: {type(primitive).__name__}")


def _draw_text(c: canvas.Canvas, run: TextRun, page_height_pt: float) -> None:
    """
    Draw a text run at its baseline.

    Font is set from the run's own style for every draw.
    """
    x_pt = _mm_to_pt(run.x)
    y_pt = page_height_pt - _mm_to_pt(run.baseline)

    c.saveState()
    c.setFont(run.style.font_name, run.style.font_size)
    c.setFillColorRGB(0, 0, 0)
    if run.align == "center":
        c.drawCentredString(x_pt, y_pt, run.text)
    elif run.align == "right":
        c.drawRightString(x_pt, y_pt, run.text)
    else:
        c.drawString(x_pt, y_pt, run.text)
    c.restoreState()


def _draw_image(c: canvas.Canvas, placement: ImagePlacement, page_height_pt: float) -> None:
    reader = ImageReader(io.BytesIO(placement.image.data))
    c.drawImage(
        reader,
        _mm_to_pt(placement.x),
        _transform_y(page_height_pt, placement.y, placement.height),
        width=_mm_to_pt(placement.width),
        height=_mm_to_pt(placement.height),
        mask="auto",
    )


def _draw_rule(c: canvas.Canvas, rule: RuleLine, page_height_pt: float) -> None:
    y_pt = page_height_pt - _mm_to_pt(rule.y)
    c.saveState()
    c.setLineWidth(_mm_to_pt(rule.thickness))
    c.line(_mm_to_pt(rule.x1), y_pt, _mm_to_pt(rule.x2), y_pt)
    c.restoreState()


def _mm_to_pt(value: float) -> float:
    """Convert millimetres to PDF points (1/72 inch)."""
    return value * mm


def _transform_y(page_height_pt: float, y_mm_top: float, height_mm: float) -> float:
    """
    Convert a top-down box position to PDF's bottom-up y.

    Args:
        page_height_pt: Page height in points
        y_mm_top: Top of the box from the page top (mm)
        height_mm: Height of the box (mm)

    Returns:
        y of the box's bottom edge from the page bottom (points)
    """
    return page_height_pt - _mm_to_pt(y_mm_top) - _mm_to_pt(height_mm)
