"""
Module: paper_builder.layout

Purpose:
    Page layout for question papers.
    Converts a Document into positioned primitives on numbered pages.

Key Functions:
    - compose_paper(): Main entry point for layout
    - stamp_page_numbers(): Footer pass over completed pages

Key Classes:
    - PageFlowCursor: Page-break state machine
    - TextRun, ImagePlacement, RuleLine: Placed primitives
    - PagePlan: Single finished page
    - LayoutResult: Final layout output

Dependencies:
    - reportlab: Font metrics (via paper_builder.text)
    - paper_builder.images: Resolved images

Used By:
    - paper_builder.controller: Main build controller
"""

from .models import (
    TextRun,
    ImagePlacement,
    RuleLine,
    PageBuilder,
    PagePlan,
    LayoutResult,
)
from .cursor import PageFlowCursor, Allocation
from .blocks import render_header, render_question, render_options, render_image
from .finalizer import stamp_page_numbers
from .composer import compose_paper

__all__ = [
    # Models
    "TextRun",
    "ImagePlacement",
    "RuleLine",
    "PageBuilder",
    "PagePlan",
    "LayoutResult",
    # Cursor
    "PageFlowCursor",
    "Allocation",
    # Functions
    "render_header",
    "render_question",
    "render_options",
    "render_image",
    "stamp_page_numbers",
    "compose_paper",
]
