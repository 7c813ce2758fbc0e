"""
Module: paper_builder.layout.finalizer

Purpose:
    Pagination finalizer. Second pass over the completed page list that
    stamps a centred "Page i of N" footer on every page.

Key Functions:
    - stamp_page_numbers(): PageBuilders -> immutable PagePlans

The total N is only known once every block has been placed, so this
never runs interleaved with placement.

Used By:
    - paper_builder.layout.composer: Final assembly step
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..config import LayoutConfig
from ..text.measure import TextStyle
from .models import PageBuilder, PagePlan, TextRun

logger = logging.getLogger(__name__)


def footer_text(number: int, total: int) -> str:
    return f"Page {number} of {total}"


def stamp_page_numbers(pages: Sequence[PageBuilder], config: LayoutConfig) -> tuple[PagePlan, ...]:
    """
    Freeze pages and add page-number footers.

    Args:
        pages: Every page of the assembly, in order
        config: Layout configuration (footer position and size)

    Returns:
        Tuple of PagePlans, one per page, each with its footer set

    Example:
        >>> plans = stamp_page_numbers(cursor.pages, config)
        >>> [p.footer.text for p in plans]
        ['Page 1 of 2', 'Page 2 of 2']
    """
    total = len(pages)
    style = TextStyle(config.footer_font_size)
    # footer_offset is the distance from the page bottom to the footer baseline
    footer_top = config.page_height - config.footer_offset - style.ascent

    plans = []
    for position, page in enumerate(pages):
        if page.index != position:
            raise ValueError(f"Page list out of order: index {page.index} at position {position}")
        footer = TextRun(
            x=config.page_width / 2,
            y=footer_top,
            text=footer_text(position + 1, total),
            style=style,
            align="center",
        )
        plans.append(PagePlan(index=page.index, primitives=tuple(page.primitives), footer=footer))

    logger.debug(f"Stamped page numbers on {total} page(s)")
    return tuple(plans)
