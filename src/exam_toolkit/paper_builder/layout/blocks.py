"""
Module: paper_builder.layout.blocks

Purpose:
    Block renderers. Each renderer measures its block, asks the cursor
    for space one atomic unit at a time, and places primitives at fixed
    coordinates.

Key Functions:
    - render_header(): Institution, title, metadata, rule, instructions
    - render_question(): "Qi. <text> [n marks]" statement
    - render_options(): Multiple-choice options (vertical/horizontal/grid)
    - render_image(): Image with caption, or a placeholder line

Dependencies:
    - paper_builder.text: Wrapping and measurement
    - paper_builder.images: Scaling, ImageDecodeError
    - paper_builder.layout.cursor: Space allocation

Used By:
    - paper_builder.layout.composer: Document assembly

Row layouts:
    Horizontal (4 columns) and grid (2 columns) options are placed one
    row at a time. A row that does not fit moves to the next page, and
    the rows after it continue below it there.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from exam_toolkit.core.models import Document, ImageBlock, OptionLayout, OptionsBlock, QuestionBlock

from ..config import IMAGE_PLACEHOLDER_TEXT, LayoutConfig
from ..images.normalizer import ImageDecodeError, NormalizedImage, scale_image
from ..text.measure import TextStyle, block_height, text_width, wrap_text
from .cursor import PageFlowCursor
from .models import ImagePlacement, PageBuilder, RuleLine, TextRun

logger = logging.getLogger(__name__)

# ZapfDingbats "4" is the heavy check mark
CHECK_MARK_GLYPH = "4"
CHECK_MARK_FAMILY = "ZapfDingbats"


def marks_label(marks: int) -> str:
    """'1 mark' or 'n marks'."""
    return f"{marks} {'mark' if marks == 1 else 'marks'}"


def total_marks_label(total: int) -> str:
    """Header text for the paper total, singular when the total is 1."""
    return f"Total {'Mark' if total == 1 else 'Marks'}: {total}"


def question_heading(number: int, question: QuestionBlock) -> str:
    """Full statement line for a question, before wrapping."""
    return f"Q{number}. {question.text} [{marks_label(question.marks)}]"


# ─────────────────────────────────────────────────────────────────────────────
# Header
# ─────────────────────────────────────────────────────────────────────────────

def render_header(page: PageBuilder, document: Document, config: LayoutConfig) -> float:
    """
    Draw the paper header on page 1.

    Runs once, before any question, at fixed offsets from header_top.
    It does not go through the cursor.

    Args:
        page: First page
        document: Paper being laid out
        config: Layout configuration

    Returns:
        y at which the first question starts
    """
    centre = config.page_width / 2
    left = config.margin_left
    right = config.content_right
    y = config.header_top

    if document.institution:
        style = TextStyle(config.institution_font_size)
        for line in wrap_text(document.institution, config.content_width, style):
            page.add(TextRun(x=centre, y=y, text=line, style=style, align="center"))
            y += style.line_height
        y += config.header_line_gap

    title_style = TextStyle(config.title_font_size, bold=True)
    for line in wrap_text(document.title, config.content_width, title_style):
        page.add(TextRun(x=centre, y=y, text=line, style=title_style, align="center"))
        y += title_style.line_height
    y += config.header_line_gap

    meta = TextStyle(config.metadata_font_size)
    rows = (
        (f"Subject: {document.subject}", f"Exam Type: {document.exam_type}"),
        (f"Duration: {document.duration_minutes} minutes", total_marks_label(document.total_marks)),
    )
    for left_text, right_text in rows:
        page.add(TextRun(x=left, y=y, text=left_text, style=meta))
        page.add(TextRun(x=right, y=y, text=right_text, style=meta, align="right"))
        y += meta.line_height

    y += config.header_line_gap / 2
    page.add(RuleLine(x1=left, x2=right, y=y, thickness=config.rule_width))
    y += config.header_line_gap

    if config.instructions:
        style = TextStyle(config.instructions_font_size, italic=True)
        for line in wrap_text(config.instructions, config.content_width, style):
            page.add(TextRun(x=left, y=y, text=line, style=style))
            y += style.line_height

    return y + config.header_bottom_gap


# ─────────────────────────────────────────────────────────────────────────────
# Questions
# ─────────────────────────────────────────────────────────────────────────────

def render_question(
    cursor: PageFlowCursor,
    number: int,
    question: QuestionBlock,
    config: LayoutConfig,
) -> List[TextRun]:
    """
    Place the question statement.

    The wrapped statement is one unit: all of its lines go on the same
    page, with question_keep_with_next space left below so the statement
    is not stranded at a page foot. A statement taller than a whole page
    falls back to line-by-line placement.

    Returns:
        The placed text runs
    """
    style = TextStyle(config.question_font_size, bold=True)
    lines = wrap_text(question_heading(number, question), config.content_width, style)
    runs = _place_lines(
        cursor, lines, config.margin_left, style,
        keep_with=config.question_keep_with_next,
        label=f"Q{number}",
    )
    cursor.advance(config.gap(config.question_text_gap))
    logger.debug(f"Q{number}: {len(lines)} line(s) on page {cursor.page_index + 1}")
    return runs


def render_options(
    cursor: PageFlowCursor,
    options: OptionsBlock,
    config: LayoutConfig,
) -> List[TextRun]:
    """
    Place a multiple-choice option set.

    Vertical: one option per unit, each wrapped to the indented content
    width. Horizontal/grid: one row per unit; every cell is wrapped to
    its column and the row is as tall as its tallest cell (at least
    option_row_height).

    When show_correct_answer is set, correct options get a check mark
    after their text.

    Returns:
        The placed text runs, markers included
    """
    if not options.options:
        raise ValueError("Cannot render an empty option set")

    if options.layout is OptionLayout.VERTICAL:
        runs = _render_vertical_options(cursor, options, config)
    else:
        runs = _render_row_options(cursor, options, config)

    cursor.advance(config.gap(config.options_gap))
    return runs


def _render_vertical_options(
    cursor: PageFlowCursor,
    options: OptionsBlock,
    config: LayoutConfig,
) -> List[TextRun]:
    style = TextStyle(config.option_font_size)
    x = config.margin_left + config.option_indent
    width = config.content_width - config.option_indent
    runs: List[TextRun] = []

    for label, option in options.labelled():
        marked = options.show_correct_answer and option.is_correct
        text_room = width - (_marker_room(style) if marked else 0.0)
        lines = wrap_text(f"{label}. {option.text}", text_room, style)
        placed = _place_lines(cursor, lines, x, style, label=f"option {label}")
        runs.extend(placed)
        if marked:
            runs.append(_add_marker(cursor.page, placed[-1]))
        cursor.advance(config.option_spacing)

    return runs


def _render_row_options(
    cursor: PageFlowCursor,
    options: OptionsBlock,
    config: LayoutConfig,
) -> List[TextRun]:
    style = TextStyle(config.option_font_size)
    columns = options.layout.columns
    left = config.margin_left + config.option_indent
    column_width = (config.content_width - config.option_indent) / columns
    cell_width = column_width - config.option_column_gap
    labelled = options.labelled()
    runs: List[TextRun] = []

    for row_start in range(0, len(labelled), columns):
        row = labelled[row_start:row_start + columns]
        cells: List[Tuple[List[str], bool]] = []
        for label, option in row:
            marked = options.show_correct_answer and option.is_correct
            text_room = cell_width - (_marker_room(style) if marked else 0.0)
            cells.append((wrap_text(f"{label}. {option.text}", text_room, style), marked))

        row_height = max(
            config.option_row_height,
            max(block_height(lines, style) for lines, _ in cells),
        )
        slot = cursor.request(row_height)

        for col, (lines, marked) in enumerate(cells):
            x = left + col * column_width
            cell_runs = [
                slot.page.add(TextRun(x=x, y=slot.top + i * style.line_height, text=line, style=style))
                for i, line in enumerate(lines)
            ]
            runs.extend(cell_runs)
            if marked and cell_runs:
                runs.append(_add_marker(slot.page, cell_runs[-1]))

    return runs


def _marker_style(style: TextStyle) -> TextStyle:
    return TextStyle(style.font_size, family=CHECK_MARK_FAMILY)


def _marker_room(style: TextStyle) -> float:
    """Width reserved at the end of a line for ' <check mark>'."""
    return text_width(" ", style) + text_width(CHECK_MARK_GLYPH, _marker_style(style))


def _add_marker(page: PageBuilder, after: TextRun) -> TextRun:
    """Place a check mark right after a text run."""
    marker = TextRun(
        x=after.left + after.width + text_width(" ", after.style),
        y=after.y,
        text=CHECK_MARK_GLYPH,
        style=_marker_style(after.style),
    )
    return page.add(marker)


# ─────────────────────────────────────────────────────────────────────────────
# Images
# ─────────────────────────────────────────────────────────────────────────────

def render_image(
    cursor: PageFlowCursor,
    number: int,
    image: ImageBlock,
    resolved: Optional[NormalizedImage | ImageDecodeError],
    config: LayoutConfig,
) -> Optional[str]:
    """
    Place a question image and its caption.

    The scaled image, the caption gap and the wrapped caption are one
    unit. If the image could not be resolved, a short italic placeholder
    line is placed instead and layout carries on.

    Args:
        cursor: Layout cursor
        number: 1-based question number (for diagnostics)
        image: Image block (for the caption)
        resolved: Result of the pre-resolution pass; None if the image
            was never resolved
        config: Layout configuration

    Returns:
        Warning message if the placeholder was used, else None
    """
    x = config.margin_left + config.image_indent
    caption_style = TextStyle(config.caption_font_size, italic=True)

    if not isinstance(resolved, NormalizedImage):
        reason = resolved if resolved is not None else "image was not resolved"
        slot = cursor.request(caption_style.line_height)
        slot.page.add(TextRun(x=x, y=slot.top, text=IMAGE_PLACEHOLDER_TEXT, style=caption_style))
        message = f"Q{number}: image replaced by placeholder ({reason})"
        logger.warning(message)
        return message

    width, height = scale_image(
        resolved.width,
        resolved.height,
        config.image_max_width,
        config.effective_image_max_height,
    )

    caption_lines: Sequence[str] = ()
    if image.caption:
        caption_width = max(width, min(config.caption_min_width, config.image_max_width))
        caption_lines = wrap_text(f"Fig: {image.caption}", caption_width, caption_style)

    unit_height = height + config.caption_gap + block_height(caption_lines, caption_style)
    if cursor.fits_on_empty_page(unit_height):
        slot = cursor.request(unit_height)
        slot.page.add(ImagePlacement(x=x, y=slot.top, width=width, height=height, image=resolved))

        y = slot.top + height + config.caption_gap
        for line in caption_lines:
            slot.page.add(TextRun(x=x, y=y, text=line, style=caption_style))
            y += caption_style.line_height
    else:
        # Image plus caption is taller than a page: the caption flows on after the image
        slot = cursor.request(height + config.caption_gap)
        slot.page.add(ImagePlacement(x=x, y=slot.top, width=width, height=height, image=resolved))
        _place_lines(cursor, caption_lines, x, caption_style, label=f"Q{number} caption")

    logger.debug(
        f"Q{number}: image {resolved.width}x{resolved.height}px drawn at "
        f"{width:.1f}x{height:.1f}mm on page {slot.page.index + 1}"
    )
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _place_lines(
    cursor: PageFlowCursor,
    lines: Sequence[str],
    x: float,
    style: TextStyle,
    *,
    keep_with: float = 0.0,
    label: str = "",
) -> List[TextRun]:
    """
    Place wrapped lines as a single unit when they fit on one page.

    Falls back to one unit per line when the block is taller than a
    whole page; lines themselves are never split.
    """
    height = block_height(lines, style)
    runs: List[TextRun] = []

    if cursor.fits_on_empty_page(height + keep_with):
        slot = cursor.request(height, keep_with=keep_with)
        for i, line in enumerate(lines):
            runs.append(slot.page.add(
                TextRun(x=x, y=slot.top + i * style.line_height, text=line, style=style)
            ))
        return runs

    logger.warning(f"{label} is taller than a page ({height:.1f}mm); placing line by line")
    for line in lines:
        slot = cursor.request(style.line_height)
        runs.append(slot.page.add(TextRun(x=x, y=slot.top, text=line, style=style)))
    return runs
