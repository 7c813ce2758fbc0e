"""
Module: paper_builder

Purpose:
    Question paper builder. Lays out a validated Document onto A4 pages
    and renders the result to PDF.

Key Functions:
    - build_question_paper(): Full pipeline, Document -> PDF bytes
    - paper_filename(): Download filename for a paper title

Key Classes:
    - LayoutConfig: Page geometry, fonts and spacing
    - BuildResult: Output of a build
    - BuildError: Output failure

Used By:
    - exam_toolkit.cli
"""

from .config import LayoutConfig, load_layout_config
from .controller import BuildError, BuildResult, build_question_paper, paper_filename

__all__ = [
    "LayoutConfig",
    "load_layout_config",
    "BuildError",
    "BuildResult",
    "build_question_paper",
    "paper_filename",
]
