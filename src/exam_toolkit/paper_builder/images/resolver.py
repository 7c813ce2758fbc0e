"""
Module: paper_builder.images.resolver

Purpose:
    Resolve every question image before layout starts, so the layout
    pass itself stays synchronous and free of I/O.

Key Functions:
    - resolve_document_images(): {question number: NormalizedImage | ImageDecodeError}

Dependencies:
    - concurrent.futures: Parallel fetches
    - paper_builder.images.normalizer: Per-image resolution

Used By:
    - paper_builder.controller: Before compose_paper()

Embedded images resolve inline. Only sources that need fetching go to
the thread pool. A fetch that has not finished by its deadline fails that
one image; the rest of the paper is unaffected.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Dict, Optional, Union

import requests

from exam_toolkit.core.models import Document

from .normalizer import (
    DEFAULT_FETCH_ATTEMPTS,
    DEFAULT_FETCH_TIMEOUT_S,
    ImageDecodeError,
    NormalizedImage,
    resolve_image,
)

logger = logging.getLogger(__name__)

ResolvedImage = Union[NormalizedImage, ImageDecodeError]
ImageMap = Dict[int, ResolvedImage]


def resolve_document_images(
    document: Document,
    *,
    timeout: float = DEFAULT_FETCH_TIMEOUT_S,
    attempts: int = DEFAULT_FETCH_ATTEMPTS,
    max_workers: int = 4,
    session: Optional[requests.Session] = None,
) -> ImageMap:
    """
    Resolve all images in a document.

    Args:
        document: Paper whose question images should be resolved
        timeout: Per-request network timeout in seconds
        attempts: Maximum fetch attempts per remote image
        max_workers: Thread pool size for remote fetches
        session: Optional shared requests session

    Returns:
        Mapping of 1-based question number to the resolved image, or to
        the ImageDecodeError explaining why it could not be resolved.
        Questions without images are absent.

    Example:
        >>> images = resolve_document_images(doc)
        >>> isinstance(images[2], ImageDecodeError)
        True  # question 2's image failed; layout will use a placeholder
    """
    results: ImageMap = {}
    pending: Dict[int, Future] = {}
    executor: Optional[ThreadPoolExecutor] = None

    try:
        for number, question in document.numbered():
            if question.image is None:
                continue

            if question.image.has_embedded_data:
                results[number] = _resolve_or_error(number, question.image)
                continue

            if executor is None:
                executor = ThreadPoolExecutor(max_workers=max_workers)
            pending[number] = executor.submit(
                resolve_image,
                question.image,
                timeout=timeout,
                attempts=attempts,
                session=session,
            )

        # Worst case for one image: every attempt runs to its timeout
        deadline = timeout * max(1, attempts) + 1.0
        for number, future in pending.items():
            try:
                results[number] = future.result(timeout=deadline)
            except FutureTimeout:
                future.cancel()
                logger.warning(f"Image for Q{number} timed out after {deadline:.0f}s")
                results[number] = ImageDecodeError(f"Timed out after {deadline:.0f}s")
            except ImageDecodeError as e:
                logger.warning(f"Image for Q{number} could not be resolved: {e}")
                results[number] = e
    finally:
        if executor is not None:
            # Timed-out fetches are abandoned, not joined. Each worker still
            # ends once its own request timeout expires.
            abandoned = sum(1 for f in pending.values() if not f.done())
            if abandoned:
                logger.debug(f"Abandoning {abandoned} unfinished image fetch(es)")
            executor.shutdown(wait=False, cancel_futures=True)

    failed = sum(1 for r in results.values() if isinstance(r, ImageDecodeError))
    logger.info(f"Resolved {len(results) - failed}/{len(results)} images")
    return dict(sorted(results.items()))


def _resolve_or_error(number: int, image) -> ResolvedImage:
    try:
        return resolve_image(image)
    except ImageDecodeError as e:
        logger.warning(f"Image for Q{number} could not be resolved: {e}")
        return e
