"""
Module: paper_builder.layout.composer

Purpose:
    Document assembler. Lays out a whole question paper: header, then
    every question block strictly in document order, then the page-number
    pass.

Key Functions:
    - compose_paper(): Document -> LayoutResult

Algorithm:
    1. Validate the document (fails before any layout work)
    2. Draw the header on page 1; the cursor starts below it
    3. For each question: statement, options (multiple choice only),
       image, then the inter-question gap
    4. Stamp "Page i of N" footers once N is known

Dependencies:
    - paper_builder.layout.blocks: Block renderers
    - paper_builder.layout.cursor: PageFlowCursor
    - paper_builder.layout.finalizer: stamp_page_numbers

Used By:
    - paper_builder.controller: Build pipeline
"""

from __future__ import annotations

import logging
from typing import List, Optional

from exam_toolkit.core.models import Document, QuestionKind
from exam_toolkit.core.schemas import validate_document

from ..config import LayoutConfig
from ..images.resolver import ImageMap
from .blocks import render_header, render_image, render_options, render_question
from .cursor import PageFlowCursor
from .finalizer import stamp_page_numbers
from .models import LayoutResult, PageBuilder, TextRun

logger = logging.getLogger(__name__)


def compose_paper(
    document: Document,
    config: LayoutConfig,
    images: Optional[ImageMap] = None,
) -> LayoutResult:
    """
    Lay out a question paper.

    Pure and synchronous: images must already be resolved (see
    resolve_document_images()). A question whose image is missing from
    `images` gets the image placeholder.

    Args:
        document: Paper to lay out
        config: Layout configuration
        images: Resolved images keyed by 1-based question number

    Returns:
        LayoutResult with finalized pages

    Raises:
        ValidationError: If the document is not printable
        MeasurementError: If text cannot be measured; no partial
            layout is returned

    Example:
        >>> result = compose_paper(document, LayoutConfig())
        >>> result.pages[-1].footer.text
        'Page 2 of 2'
    """
    validate_document(document)
    images = images or {}

    first_page = PageBuilder(index=0)
    start_y = render_header(first_page, document, config)
    cursor = PageFlowCursor(config, start_y=start_y, first_page=first_page)

    warnings: List[str] = []
    question_page_map: dict[int, list[int]] = {}

    for number, question in document.numbered():
        statement = render_question(cursor, number, question, config)
        start_page = _page_index_of(cursor, statement[0])

        if question.has_options:
            render_options(cursor, question.options, config)
        elif question.options is not None and question.kind is not QuestionKind.MCQ:
            logger.debug(f"Q{number}: options ignored for {question.kind.value} question")

        if question.image is not None:
            warning = render_image(cursor, number, question.image, images.get(number), config)
            if warning:
                warnings.append(warning)

        gap = config.mcq_question_gap if question.kind is QuestionKind.MCQ else config.question_gap
        cursor.advance(config.gap(gap))

        question_page_map[number] = list(range(start_page, cursor.page_index + 1))

    warnings.extend(cursor.overflow_warnings)
    pages = stamp_page_numbers(cursor.pages, config)

    logger.info(
        f"Laid out {document.question_count} question(s), "
        f"{document.total_marks} marks, onto {len(pages)} page(s)"
    )

    return LayoutResult(
        pages=pages,
        warnings=warnings,
        question_page_map=question_page_map,
    )


def _page_index_of(cursor: PageFlowCursor, run: TextRun) -> int:
    """Index of the page holding a placed run (searching from the newest page)."""
    for page in reversed(cursor.pages):
        if any(p is run for p in page.primitives):
            return page.index
    raise ValueError(f"Run was never placed: {run.text!r}")
