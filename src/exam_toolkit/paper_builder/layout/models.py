"""
Module: paper_builder.layout.models

Purpose:
    Data models for page layout.
    Placed primitives (text runs, images, rule lines), the mutable page
    used while laying out, and the immutable page plan produced once the
    finalizer has stamped page numbers.

Key Classes:
    - TextRun: One line of text at a fixed position
    - ImagePlacement: Raster image at a fixed box
    - RuleLine: Horizontal rule
    - PageBuilder: Page under construction (owned by the cursor)
    - PagePlan: Finished page (immutable)
    - LayoutResult: Final layout output

Dependencies:
    - dataclasses (std)
    - paper_builder.text: TextStyle
    - paper_builder.images: NormalizedImage

Used By:
    - paper_builder.layout.cursor: Creates PageBuilders
    - paper_builder.layout.blocks: Emits primitives
    - paper_builder.layout.finalizer: Creates PagePlans
    - paper_builder.output.renderer: Draws primitives

Coordinates:
    Millimetres from the page's top-left corner. `top` is the top edge of
    a primitive's box and `bottom` is top + height.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple, Union

from ..images.normalizer import NormalizedImage
from ..text.measure import TextStyle, text_width

Align = Literal["left", "center", "right"]


@dataclass(frozen=True)
class TextRun:
    """
    A single line of text placed on a page.

    Attributes:
        x: Anchor x. Left edge for "left", centre for "center",
            right edge for "right"
        y: Top of the line box
        text: Text without newlines
        style: Font settings
        align: Horizontal alignment relative to x

    Example:
        >>> run = TextRun(x=20, y=40, text="Q1. Define force.", style=TextStyle(10))
        >>> round(run.bottom, 2)
        44.06
    """

    x: float
    y: float
    text: str
    style: TextStyle
    align: Align = "left"

    @property
    def top(self) -> float:
        return self.y

    @property
    def height(self) -> float:
        return self.style.line_height

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def width(self) -> float:
        return text_width(self.text, self.style)

    @property
    def left(self) -> float:
        """Left edge after alignment."""
        if self.align == "center":
            return self.x - self.width / 2
        if self.align == "right":
            return self.x - self.width
        return self.x

    @property
    def baseline(self) -> float:
        """y of the text baseline."""
        return self.y + self.style.ascent


@dataclass(frozen=True)
class ImagePlacement:
    """
    An image drawn into a fixed box.

    Attributes:
        x: Left edge
        y: Top edge
        width: Drawn width
        height: Drawn height
        image: Bytes to embed
    """

    x: float
    y: float
    width: float
    height: float
    image: NormalizedImage

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class RuleLine:
    """Horizontal rule from x1 to x2 at y."""

    x1: float
    x2: float
    y: float
    thickness: float = 0.5

    @property
    def top(self) -> float:
        return self.y

    @property
    def bottom(self) -> float:
        return self.y


Primitive = Union[TextRun, ImagePlacement, RuleLine]


@dataclass
class PageBuilder:
    """
    Page under construction.

    Owned by the layout cursor while blocks are being placed. Turned into
    an immutable PagePlan by the pagination finalizer.

    Attributes:
        index: Page number (0-indexed)
        primitives: Placed primitives in drawing order
    """

    index: int
    primitives: List[Primitive] = field(default_factory=list)

    def add(self, primitive: Primitive) -> Primitive:
        self.primitives.append(primitive)
        return primitive

    @property
    def is_empty(self) -> bool:
        return not self.primitives


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single page.

    Attributes:
        index: Page number (0-indexed)
        primitives: Body primitives in drawing order
        footer: "Page i of N" footer run

    Example:
        >>> page.number, page.footer.text
        (1, 'Page 1 of 2')
    """

    index: int
    primitives: Tuple[Primitive, ...]
    footer: Optional[TextRun] = None

    @property
    def number(self) -> int:
        """1-based page number."""
        return self.index + 1

    @property
    def text_runs(self) -> list[TextRun]:
        return [p for p in self.primitives if isinstance(p, TextRun)]

    @property
    def images(self) -> list[ImagePlacement]:
        return [p for p in self.primitives if isinstance(p, ImagePlacement)]

    @property
    def rules(self) -> list[RuleLine]:
        return [p for p in self.primitives if isinstance(p, RuleLine)]

    @property
    def lines(self) -> list[str]:
        """Text of every body text run, top to bottom."""
        return [r.text for r in sorted(self.text_runs, key=lambda r: (r.y, r.left))]

    @property
    def is_empty(self) -> bool:
        return len(self.primitives) == 0


@dataclass(frozen=True)
class LayoutResult:
    """
    Final layout output with diagnostics.

    Attributes:
        pages: Tuple of PagePlans
        warnings: Degraded-output messages (failed images, oversize units)
        question_page_map: 1-based question number -> page indices it
            appears on

    Example:
        >>> result = compose_paper(document, LayoutConfig())
        >>> result.page_count
        2
    """

    pages: tuple[PagePlan, ...]
    warnings: list[str] = field(default_factory=list)
    question_page_map: dict[int, list[int]] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        """Number of pages in layout."""
        return len(self.pages)

    @property
    def total_placements(self) -> int:
        """Total number of body primitives across all pages."""
        return sum(len(p.primitives) for p in self.pages)

    def all_lines(self) -> list[str]:
        """Body text of every page in reading order."""
        return [line for page in self.pages for line in page.lines]
