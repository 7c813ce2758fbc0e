"""
Module: document

Purpose:
    Immutable description of a question paper as handed to the layout
    engine: header metadata plus the ordered question blocks. The engine
    never reorders blocks; print order is list order.

Key Classes:
    - Document: Title, metadata and question blocks
    - QuestionBlock: One numbered question
    - OptionsBlock / Option: Multiple-choice option set
    - ImageBlock: Raster bytes or a source reference, with caption

Key Functions:
    - option_label(index): Positional option label (A, B, C, ...)

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.schemas.validator
    - core.utils.serialization
    - paper_builder.layout: Block renderers and composer
    - paper_builder.images: Image normalizer

Design Notes:
    total_marks is never stored. It is always summed from the question
    blocks so the header cannot drift from the questions it describes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class QuestionKind(str, Enum):
    """Question type. Values match the portal's export payload."""

    MCQ = "mcq"
    SHORT = "short"
    LONG = "long"


class OptionLayout(str, Enum):
    """Arrangement of multiple-choice options on the page."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    GRID = "grid"

    @property
    def columns(self) -> int:
        """Options per row."""
        if self is OptionLayout.HORIZONTAL:
            return 4
        if self is OptionLayout.GRID:
            return 2
        return 1


def option_label(index: int) -> str:
    """
    Positional label for an option.

    Args:
        index: 0-based option index

    Returns:
        "A" for 0, "B" for 1, ... "Z" for 25, then "AA", "AB", ...

    Example:
        >>> option_label(2)
        'C'
    """
    if index < 0:
        raise ValueError(f"Option index cannot be negative: {index}")
    label = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        label = chr(ord("A") + rem) + label
    return label


@dataclass(frozen=True)
class Option:
    """
    A single multiple-choice option.

    The display label is not stored; it comes from the option's position.
    is_correct is informational and only drawn when the owning
    OptionsBlock asks for it.
    """

    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class OptionsBlock:
    """
    Ordered option set for a multiple-choice question.

    Attributes:
        options: Options in print order
        layout: Vertical list, 4-column row or 2-column grid
        show_correct_answer: Draw a check mark beside correct options.
            A print-time toggle for answer keys, nothing more.
    """

    options: Tuple[Option, ...]
    layout: OptionLayout = OptionLayout.VERTICAL
    show_correct_answer: bool = False

    def labelled(self) -> list[tuple[str, Option]]:
        """Options paired with their positional labels."""
        return [(option_label(i), opt) for i, opt in enumerate(self.options)]


@dataclass(frozen=True)
class ImageBlock:
    """
    Image attached to a question.

    Exactly one of data/source should be set. data holds raster bytes
    that can be embedded as-is; source is a reference that still needs
    fetching and decoding (data: URL, http(s) URL, file URL or path).
    """

    data: Optional[bytes] = None
    source: Optional[str] = None
    caption: Optional[str] = None

    @property
    def has_embedded_data(self) -> bool:
        """True when raster bytes are already available."""
        return self.data is not None or (
            self.source is not None and self.source.startswith("data:image/")
        )


@dataclass(frozen=True)
class QuestionBlock:
    """
    One question on the paper.

    The question number is not stored here; it is the block's 1-based
    position in Document.questions.

    Attributes:
        text: Question statement
        marks: Positive mark value
        kind: Multiple choice, short answer or long answer
        options: Option set (only rendered for multiple choice)
        image: Optional image with caption
    """

    text: str
    marks: int
    kind: QuestionKind = QuestionKind.SHORT
    options: Optional[OptionsBlock] = None
    image: Optional[ImageBlock] = None

    @property
    def has_options(self) -> bool:
        """True when options should be rendered."""
        return (
            self.kind is QuestionKind.MCQ
            and self.options is not None
            and len(self.options.options) > 0
        )


@dataclass(frozen=True)
class Document:
    """
    Complete question paper description (immutable).

    Attributes:
        title: Paper title
        subject: Subject name
        exam_type: Exam type label such as "Mid Term"
        duration_minutes: Sitting time in minutes
        questions: Question blocks in print order
        institution: Optional institution name printed above the title

    Invariants:
        - total_marks is always calculated from questions
        - questions keep their given order

    Example:
        >>> doc = Document(
        ...     title="Unit Test 1",
        ...     subject="Physics",
        ...     exam_type="Quiz",
        ...     duration_minutes=30,
        ...     questions=(QuestionBlock(text="Define force.", marks=5),),
        ... )
        >>> doc.total_marks
        5
    """

    title: str
    subject: str
    exam_type: str
    duration_minutes: int
    questions: Tuple[QuestionBlock, ...] = field(default_factory=tuple)
    institution: Optional[str] = None

    @property
    def total_marks(self) -> int:
        """Sum of question marks, recomputed on every access."""
        return sum(q.marks for q in self.questions)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def numbered(self) -> list[tuple[int, QuestionBlock]]:
        """Question blocks paired with their 1-based numbers."""
        return list(enumerate(self.questions, start=1))
