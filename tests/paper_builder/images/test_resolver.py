"""
Unit tests for document-wide image pre-resolution.
"""

import threading
from unittest.mock import MagicMock

import pytest

from exam_toolkit.core.models import ImageBlock, QuestionBlock
from exam_toolkit.paper_builder.images import (
    ImageDecodeError,
    NormalizedImage,
    resolve_document_images,
)


@pytest.fixture
def ok_session(png_bytes):
    session = MagicMock()
    response = MagicMock()
    response.status_code = 200
    response.content = png_bytes
    session.get.return_value = response
    return session


class TestResolveDocumentImages:
    def test_keys_are_question_numbers_with_images(self, make_document, png_bytes, ok_session):
        doc = make_document(
            QuestionBlock("embedded", 1, image=ImageBlock(data=png_bytes)),
            QuestionBlock("no image", 1),
            QuestionBlock("remote", 1, image=ImageBlock(source="https://example.com/a.png")),
        )

        images = resolve_document_images(doc, session=ok_session)

        assert list(images) == [1, 3]
        assert all(isinstance(r, NormalizedImage) for r in images.values())
        assert images[1].data is png_bytes
        assert images[3].format == "JPEG"

    def test_failures_are_values_not_exceptions(self, make_document, png_bytes):
        session = MagicMock()
        bad = MagicMock()
        bad.status_code = 404
        session.get.return_value = bad
        doc = make_document(
            QuestionBlock("broken remote", 1, image=ImageBlock(source="https://example.com/x.png")),
            QuestionBlock("broken bytes", 1, image=ImageBlock(data=b"garbage")),
            QuestionBlock("fine", 1, image=ImageBlock(data=png_bytes)),
        )

        images = resolve_document_images(doc, session=session)

        assert isinstance(images[1], ImageDecodeError)
        assert isinstance(images[2], ImageDecodeError)
        assert isinstance(images[3], NormalizedImage)

    def test_no_images_no_fetches(self, make_document, short_question):
        session = MagicMock()

        assert resolve_document_images(make_document(short_question), session=session) == {}
        session.get.assert_not_called()

    def test_damaged_embedded_image_is_a_value(self, make_document, damaged_png_bytes, png_bytes):
        doc = make_document(
            QuestionBlock("damaged", 1, image=ImageBlock(data=damaged_png_bytes)),
            QuestionBlock("fine", 1, image=ImageBlock(data=png_bytes)),
        )

        images = resolve_document_images(doc)

        assert isinstance(images[1], ImageDecodeError)
        assert isinstance(images[2], NormalizedImage)

    def test_slow_fetch_fails_only_that_image(self, make_document, png_bytes):
        release = threading.Event()
        session = MagicMock()
        session.get.side_effect = lambda url, timeout: release.wait(5)
        doc = make_document(
            QuestionBlock("slow", 1, image=ImageBlock(source="https://example.com/slow.png")),
            QuestionBlock("fine", 1, image=ImageBlock(data=png_bytes)),
        )

        try:
            images = resolve_document_images(doc, timeout=0.05, attempts=1, session=session)
        finally:
            release.set()

        assert isinstance(images[1], ImageDecodeError)
        assert "Timed out" in str(images[1])
        assert isinstance(images[2], NormalizedImage)
