"""
Module: paper_builder.layout.cursor

Purpose:
    Page flow cursor. Tracks the current page and vertical write
    position, and decides whether a unit of known height fits on the
    current page or must start a new one.

Key Classes:
    - PageFlowCursor: Page-break state machine
    - Allocation: Where a requested unit was placed

Algorithm:
    request(height):
    1. If y + height (+ keep_with reserve) passes the content bottom and
       the current page already has content, open a new page at
       margin_top.
    2. Return (page, y) for the unit and advance y by height.

    The check runs once per atomic unit (a question statement, an option
    row, an image with its caption), so a unit is never split across a
    page boundary. y only ever increases, or resets to margin_top on a
    new page.

Dependencies:
    - paper_builder.layout.models: PageBuilder
    - paper_builder.config: LayoutConfig

Used By:
    - paper_builder.layout.blocks: Block renderers
    - paper_builder.layout.composer: Document assembly
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import LayoutConfig
from .models import PageBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    """
    Space granted to one unit.

    Attributes:
        page: Page the unit goes on
        top: y of the unit's top edge
        height: Height that was requested
        new_page: True if the request opened a new page
    """

    page: PageBuilder
    top: float
    height: float
    new_page: bool = False

    @property
    def bottom(self) -> float:
        return self.top + self.height


class PageFlowCursor:
    """
    Vertical flow cursor over a growing list of pages.

    One cursor per assembly; it is never shared.

    Example:
        >>> cursor = PageFlowCursor(LayoutConfig(), start_y=50)
        >>> slot = cursor.request(10)
        >>> slot.top, cursor.y
        (50, 60)
    """

    def __init__(
        self,
        config: LayoutConfig,
        start_y: Optional[float] = None,
        first_page: Optional[PageBuilder] = None,
    ) -> None:
        """
        Initialize cursor on page 1.

        Args:
            config: Layout configuration
            start_y: Initial y on page 1 (below the header). Defaults to
                margin_top.
            first_page: Page 1 if it already holds content (the header)
        """
        self._config = config
        self._pages: List[PageBuilder] = [first_page or PageBuilder(index=0)]
        self._y = config.margin_top if start_y is None else start_y
        self.overflow_warnings: List[str] = []

    @property
    def page(self) -> PageBuilder:
        """Current page."""
        return self._pages[-1]

    @property
    def page_index(self) -> int:
        return self.page.index

    @property
    def pages(self) -> List[PageBuilder]:
        return self._pages

    @property
    def y(self) -> float:
        """Current vertical write position."""
        return self._y

    @property
    def bottom(self) -> float:
        return self._config.content_bottom

    @property
    def remaining(self) -> float:
        """Space left on the current page."""
        return self.bottom - self._y

    def fits(self, height: float, keep_with: float = 0.0) -> bool:
        """True if a unit of this height fits below the current position."""
        return self._y + height + keep_with <= self.bottom

    def fits_on_empty_page(self, height: float) -> bool:
        """True if a unit of this height fits on a fresh page at all."""
        return height <= self._config.content_height

    def new_page(self) -> PageBuilder:
        """Open a new page and move to its top margin."""
        page = PageBuilder(index=len(self._pages))
        self._pages.append(page)
        self._y = self._config.margin_top
        logger.debug(f"Started page {page.index + 1}")
        return page

    def request(self, height: float, *, keep_with: float = 0.0) -> Allocation:
        """
        Allocate vertical space for one atomic unit.

        Args:
            height: Height of the unit (mm)
            keep_with: Extra space that must also remain below the unit
                for the unit to stay on this page. Not consumed.

        Returns:
            Allocation with the page and top y for the unit

        Raises:
            ValueError: If height is negative
        """
        if height < 0:
            raise ValueError(f"Requested height cannot be negative: {height}")

        opened = False
        if not self.fits(height, keep_with) and not self.page.is_empty:
            self.new_page()
            opened = True

        if not self.fits(height):
            # Only reachable for units taller than a whole page
            message = (
                f"Unit of {height:.1f}mm overflows page {self.page_index + 1}: "
                f"{self.remaining:.1f}mm available"
            )
            logger.warning(message)
            self.overflow_warnings.append(message)

        top = self._y
        self._y += height
        return Allocation(page=self.page, top=top, height=height, new_page=opened)

    def advance(self, gap: float) -> None:
        """
        Move down by an inter-block gap.

        A gap never opens a page; the next request() does that if needed.
        Gaps are clamped at the page bottom.
        """
        if gap < 0:
            raise ValueError(f"Gap cannot be negative: {gap}")
        self._y = min(self._y + gap, max(self._y, self.bottom))
