"""
Module: paper_builder.controller

Purpose:
    Orchestrate the complete question paper pipeline.
    Validate -> Resolve images -> Compose -> Finalize -> Render

Key Functions:
    - build_question_paper(): Main entry point for building a paper
    - paper_filename(): Download filename for a paper title

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for output failures

Dependencies:
    - paper_builder.images: Image pre-resolution
    - paper_builder.layout: Composition and pagination
    - paper_builder.output: PDF rendering

Used By:
    - exam_toolkit.cli: Command-line entry point

Error surface:
    Either a complete PDF is returned or an exception is raised.
    ValidationError and MeasurementError propagate unchanged; failures
    while writing the PDF are wrapped in BuildError.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import requests

from exam_toolkit.core.models import Document, QuestionKind
from exam_toolkit.core.schemas import validate_document

from .config import LayoutConfig
from .images import ImageDecodeError, ImageMap, resolve_document_images
from .images.normalizer import DEFAULT_FETCH_ATTEMPTS, DEFAULT_FETCH_TIMEOUT_S
from .layout import LayoutResult, compose_paper
from .output.renderer import render_to_pdf

logger = logging.getLogger(__name__)

PAPER_FILENAME_SUFFIX = "_question_paper"


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        pdf: Finished PDF bytes
        filename: Suggested download filename
        total_marks: Total marks printed in the header
        page_count: Number of pages generated
        metadata: Build metadata dictionary
        warnings: Degraded-output messages (failed images etc.)

    Example:
        >>> result = build_question_paper(document)
        >>> print(f"{result.filename}: {result.page_count} pages, {result.total_marks} marks")
    """
    pdf: bytes
    filename: str
    total_marks: int
    page_count: int
    metadata: dict
    warnings: tuple[str, ...]

    def write(self, path: Path) -> Path:
        """
        Save the PDF. A directory path gets `filename` appended.

        Raises:
            BuildError: If the file cannot be written
        """
        target = path / self.filename if path.is_dir() else path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(self.pdf)
        except OSError as e:
            raise BuildError(f"Failed to write {target}: {e}") from e
        logger.info(f"Wrote {target}")
        return target


def build_question_paper(
    document: Document,
    config: Optional[LayoutConfig] = None,
    *,
    images: Optional[ImageMap] = None,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_S,
    fetch_attempts: int = DEFAULT_FETCH_ATTEMPTS,
    session: Optional[requests.Session] = None,
) -> BuildResult:
    """
    Build a question paper PDF from start to finish.

    Pipeline:
    1. Validate the document (before any work)
    2. Resolve every question image (unless `images` is given)
    3. Compose pages and stamp page numbers
    4. Render to PDF bytes

    Args:
        document: Paper to build
        config: Layout configuration (defaults to compact A4)
        images: Pre-resolved images keyed by question number
        fetch_timeout: Per-request timeout for remote images (s)
        fetch_attempts: Attempts per remote image
        session: Optional requests session for image fetches

    Returns:
        BuildResult with the PDF and metadata

    Raises:
        ValidationError: If the document is not printable
        MeasurementError: If text cannot be laid out
        BuildError: If the PDF cannot be produced

    Example:
        >>> result = build_question_paper(document)
        >>> result.write(Path("output"))
        PosixPath('output/Unit_Test_1_question_paper.pdf')
    """
    config = config or LayoutConfig()
    start_time = time.perf_counter()

    logger.info(
        f"Building '{document.title}' ({document.question_count} questions, "
        f"{'compact' if config.compact else 'standard'} mode)"
    )

    # 1. Validate
    validate_document(document)

    # 2. Resolve images
    if images is None:
        images = resolve_document_images(
            document,
            timeout=fetch_timeout,
            attempts=fetch_attempts,
            session=session,
        )

    # 3. Compose + finalize
    layout = compose_paper(document, config, images)

    # 4. Render
    try:
        pdf = render_to_pdf(layout, config, title=document.title, subject=document.subject)
    except (OSError, ValueError) as e:
        raise BuildError(f"Failed to render PDF: {e}") from e

    elapsed = time.perf_counter() - start_time
    logger.info(f"Question paper generated in {elapsed:.2f}s")

    return BuildResult(
        pdf=pdf,
        filename=paper_filename(document.title),
        total_marks=document.total_marks,
        page_count=layout.page_count,
        metadata=_build_metadata(document, config, layout, images),
        warnings=tuple(layout.warnings),
    )


def paper_filename(title: str, ext: str = "pdf") -> str:
    """
    Download filename for a paper.

    Whitespace runs become underscores; characters that are unsafe in
    filenames are dropped.

    Example:
        >>> paper_filename("Mid Term: Physics 1")
        'Mid_Term_Physics_1_question_paper.pdf'
    """
    slug = re.sub(r"\s+", "_", title.strip())
    slug = re.sub(r'[\\/:*?"<>|]+', "", slug)
    slug = slug.strip("._") or "paper"
    return f"{slug}{PAPER_FILENAME_SUFFIX}.{ext}"


def _build_metadata(
    document: Document,
    config: LayoutConfig,
    layout: LayoutResult,
    images: ImageMap,
) -> dict:
    """
    Build metadata dictionary for a generated paper.

    Returns:
        Metadata dictionary ready for JSON serialization
    """
    kinds = {kind.value: 0 for kind in QuestionKind}
    for question in document.questions:
        kinds[question.kind.value] += 1

    return {
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "title": document.title,
        "subject": document.subject,
        "exam_type": document.exam_type,
        "duration_minutes": document.duration_minutes,
        "total_marks": document.total_marks,
        "question_count": document.question_count,
        "questions_by_type": kinds,
        "page_count": layout.page_count,
        "question_pages": {
            str(number): [i + 1 for i in pages]
            for number, pages in layout.question_page_map.items()
        },
        "images": {
            "total": len(images),
            "failed": sum(1 for r in images.values() if isinstance(r, ImageDecodeError)),
        },
        "compact": config.compact,
        "page_size_mm": [config.page_width, config.page_height],
    }
