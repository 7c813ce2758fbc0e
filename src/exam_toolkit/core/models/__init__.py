"""
Core Models Package

Immutable data models describing a question paper.

All models are frozen dataclasses. The layout engine reads them but never
mutates them, so a Document can be rendered repeatedly (or from several
threads) with identical output.
"""

from .document import (
    Document,
    QuestionBlock,
    QuestionKind,
    OptionsBlock,
    OptionLayout,
    Option,
    ImageBlock,
    option_label,
)

__all__ = [
    "Document",
    "QuestionBlock",
    "QuestionKind",
    "OptionsBlock",
    "OptionLayout",
    "Option",
    "ImageBlock",
    "option_label",
]
