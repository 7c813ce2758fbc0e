"""
Module: paper_builder.config

Purpose:
    Configuration for the question paper layout engine.
    Defines page geometry, font sizes, spacing and compact mode.

Key Classes:
    - LayoutConfig: Immutable layout configuration

Key Functions:
    - load_layout_config(): Read overrides from a JSON file

Dependencies:
    - dataclasses (std)

Used By:
    - paper_builder.layout: Cursor, block renderers, finalizer
    - paper_builder.output.renderer: Page size
    - paper_builder.controller: Pipeline defaults

Units:
    All lengths are millimetres measured from the page's top-left corner.
    Font sizes are points. The renderer converts to PDF points.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any


# A4 portrait
DEFAULT_PAGE_WIDTH_MM = 210.0
DEFAULT_PAGE_HEIGHT_MM = 297.0

DEFAULT_INSTRUCTIONS = (
    "Instructions: Review all questions. "
    "This is a question paper only with no answer spaces provided."
)
IMAGE_PLACEHOLDER_TEXT = "[Image could not be displayed]"


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for question paper layout (immutable).

    Attributes:
        page_width: Page width (mm)
        page_height: Page height (mm)
        margin_top: Top margin; continuation pages start here (mm)
        margin_bottom: Bottom margin; content never goes below (mm)
        margin_left: Left margin (mm)
        margin_right: Right margin (mm)
        header_top: Top of the first header line on page 1 (mm)
        footer_offset: Distance of the page footer from the page bottom (mm)
        compact: Compact mode - tighter gaps and smaller images
        compact_gap_reduction: Amount removed from every inter-block gap
            in compact mode (mm)
        image_max_height: Image height cap outside compact mode (mm)
        compact_image_max_height: Image height cap in compact mode (mm)
        question_keep_with_next: Space that must remain below a question
            statement, so it is not stranded at the foot of a page (mm)

    Example:
        >>> config = LayoutConfig()
        >>> config.content_width
        170.0
        >>> config.gap(config.question_gap)
        7.0
    """

    # Page geometry
    page_width: float = DEFAULT_PAGE_WIDTH_MM
    page_height: float = DEFAULT_PAGE_HEIGHT_MM
    margin_top: float = 20.0
    margin_bottom: float = 20.0
    margin_left: float = 20.0
    margin_right: float = 20.0
    header_top: float = 10.0
    footer_offset: float = 10.0

    # Fonts (pt)
    institution_font_size: float = 12.0
    title_font_size: float = 16.0
    metadata_font_size: float = 10.0
    instructions_font_size: float = 10.0
    question_font_size: float = 10.0
    option_font_size: float = 9.0
    caption_font_size: float = 7.0
    footer_font_size: float = 8.0

    # Header
    header_line_gap: float = 2.0
    header_bottom_gap: float = 6.0
    rule_width: float = 0.5
    instructions: str = DEFAULT_INSTRUCTIONS

    # Options
    option_indent: float = 10.0
    option_spacing: float = 1.0
    option_row_height: float = 5.0
    option_column_gap: float = 5.0

    # Images
    image_indent: float = 10.0
    image_max_height: float = 60.0
    compact_image_max_height: float = 50.0
    caption_gap: float = 2.0
    caption_min_width: float = 40.0

    # Inter-block gaps before compact reduction
    question_text_gap: float = 6.0
    options_gap: float = 5.0
    mcq_question_gap: float = 8.0
    question_gap: float = 10.0
    question_keep_with_next: float = 10.0

    # Compact mode
    compact: bool = True
    compact_gap_reduction: float = 3.0

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.content_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.content_height <= 0:
            raise ValueError("Margins exceed page height")
        if self.image_max_width <= 0:
            raise ValueError("Image indent leaves no room for images")
        for name in (
            "institution_font_size", "title_font_size", "metadata_font_size",
            "instructions_font_size", "question_font_size", "option_font_size",
            "caption_font_size", "footer_font_size",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive: {getattr(self, name)}")
        if self.option_row_height <= 0:
            raise ValueError(f"option_row_height must be positive: {self.option_row_height}")
        if self.compact_gap_reduction < 0:
            raise ValueError(
                f"compact_gap_reduction must be non-negative: {self.compact_gap_reduction}"
            )

    @property
    def content_width(self) -> float:
        """Width available for content (excluding margins)."""
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        """Height available for content (excluding margins)."""
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def content_bottom(self) -> float:
        """Lowest y any placed unit may reach."""
        return self.page_height - self.margin_bottom

    @property
    def content_right(self) -> float:
        return self.page_width - self.margin_right

    @property
    def image_max_width(self) -> float:
        """Widest an image may be drawn (indented on both sides)."""
        return self.content_width - 2 * self.image_indent

    @property
    def effective_image_max_height(self) -> float:
        """Image height cap for the current mode."""
        return self.compact_image_max_height if self.compact else self.image_max_height

    def gap(self, value: float) -> float:
        """
        Apply compact mode to an inter-block gap.

        Args:
            value: Gap size before compaction (mm)

        Returns:
            The gap reduced by compact_gap_reduction in compact mode,
            never below zero
        """
        if not self.compact:
            return value
        return max(0.0, value - self.compact_gap_reduction)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutConfig:
        """
        Build a config from a dictionary of overrides.

        Raises:
            ValueError: If data contains unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown layout settings: {unknown}")
        return cls(**data)

    def with_overrides(self, **changes: Any) -> LayoutConfig:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


def load_layout_config(path: Path) -> LayoutConfig:
    """
    Load layout overrides from a JSON file.

    Args:
        path: JSON object mapping LayoutConfig field names to values

    Returns:
        LayoutConfig with the overrides applied to the defaults
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Layout config must be a JSON object: {path}")
    return LayoutConfig.from_dict(data)
