"""
Unit tests for PDF rendering.

Generated PDFs are read back with PyMuPDF.
"""

import fitz
import pytest

from exam_toolkit.core.models import ImageBlock, QuestionBlock
from exam_toolkit.paper_builder.config import LayoutConfig
from exam_toolkit.paper_builder.images import resolve_image
from exam_toolkit.paper_builder.layout import LayoutResult, compose_paper
from exam_toolkit.paper_builder.output import render_to_pdf, write_pdf

A4_WIDTH_PT = 595.276
A4_HEIGHT_PT = 841.890


@pytest.fixture
def config():
    return LayoutConfig()


def _open(pdf: bytes) -> fitz.Document:
    return fitz.open(stream=pdf, filetype="pdf")


class TestRenderToPdf:
    def test_returns_pdf_bytes(self, make_document, short_question, config):
        layout = compose_paper(make_document(short_question), config)

        pdf = render_to_pdf(layout, config, title="Unit Test 1")

        assert pdf.startswith(b"%PDF-")

    def test_a4_pages_with_text(self, make_document, short_question, config):
        layout = compose_paper(make_document(short_question), config)

        with _open(render_to_pdf(layout, config)) as doc:
            assert doc.page_count == 1
            page = doc[0]
            assert page.rect.width == pytest.approx(A4_WIDTH_PT, abs=1.0)
            assert page.rect.height == pytest.approx(A4_HEIGHT_PT, abs=1.0)
            text = page.get_text()

        assert "Unit Test 1" in text
        assert "Total Marks: 5" in text
        assert "Q1. Define force. [5 marks]" in text
        assert "Page 1 of 1" in text

    def test_metadata(self, make_document, short_question, config):
        layout = compose_paper(make_document(short_question), config)

        with _open(render_to_pdf(layout, config, title="Unit Test 1", subject="Physics")) as doc:
            assert doc.metadata["title"] == "Unit Test 1"
            assert doc.metadata["subject"] == "Physics"

    def test_text_positions_follow_layout(self, make_document, short_question, config):
        layout = compose_paper(make_document(short_question), config)
        run = next(r for r in layout.pages[0].text_runs if r.text.startswith("Q1."))

        with _open(render_to_pdf(layout, config)) as doc:
            hits = doc[0].search_for("Q1. Define force.")

        assert len(hits) == 1
        mm = 72 / 25.4
        assert hits[0].x0 == pytest.approx(run.x * mm, abs=1.0)
        # The found box spans the run's line box (within font metric slack)
        assert hits[0].y0 <= run.baseline * mm <= hits[0].y1

    def test_images_are_embedded(self, make_document, png_bytes, config):
        block = ImageBlock(data=png_bytes, caption="Figure")
        doc = make_document(QuestionBlock("Look.", 1, image=block))
        layout = compose_paper(doc, config, {1: resolve_image(block)})

        with _open(render_to_pdf(layout, config)) as pdf:
            assert len(pdf[0].get_images()) == 1
            assert "Fig: Figure" in pdf[0].get_text()

    def test_every_page_rendered(self, make_document, config):
        questions = [QuestionBlock(f"Question {i}.", 1) for i in range(1, 41)]
        layout = compose_paper(make_document(*questions), config)

        with _open(render_to_pdf(layout, config)) as doc:
            assert doc.page_count == layout.page_count
            last = doc[doc.page_count - 1].get_text()

        assert f"Page {layout.page_count} of {layout.page_count}" in last

    def test_empty_layout(self, config):
        pdf = render_to_pdf(LayoutResult(pages=()), config)

        assert pdf.startswith(b"%PDF-")


class TestWritePdf:
    def test_writes_file(self, tmp_path, make_document, short_question, config):
        layout = compose_paper(make_document(short_question), config)

        path = write_pdf(layout, tmp_path / "nested" / "paper.pdf", config)

        assert path.exists()
        assert path.read_bytes().startswith(b"%PDF-")
