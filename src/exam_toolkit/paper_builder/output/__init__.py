"""
Module: paper_builder.output

Purpose:
    PDF rendering for question papers.
    Converts LayoutResult to PDF bytes using ReportLab.

Key Functions:
    - render_to_pdf(): Render layout to PDF bytes
    - write_pdf(): Render layout to a PDF file

Dependencies:
    - reportlab: PDF generation
    - paper_builder.layout.models: LayoutResult

Used By:
    - paper_builder.controller: Pipeline orchestration
"""

from .renderer import render_to_pdf, write_pdf

__all__ = [
    "render_to_pdf",
    "write_pdf",
]
