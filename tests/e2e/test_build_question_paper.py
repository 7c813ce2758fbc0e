"""
End-to-end tests: payload -> Document -> PDF.
"""

import json
from unittest.mock import MagicMock, patch

import fitz
import pytest

from exam_toolkit.core.models import ImageBlock, QuestionBlock
from exam_toolkit.core.schemas import ValidationError
from exam_toolkit.core.utils import document_from_dict
from exam_toolkit.paper_builder import (
    BuildError,
    LayoutConfig,
    build_question_paper,
    paper_filename,
)


@pytest.fixture
def payload(png_bytes) -> dict:
    import base64

    data_url = "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
    return {
        "title": "Unit Test 1",
        "subject": "Physics",
        "examType": "Quiz",
        "duration": 45,
        "institution": "Example University",
        "questions": [
            {"text": "Define force.", "marks": 5, "type": "short"},
            {
                "text": "Which quantity is a vector?",
                "marks": 1,
                "type": "mcq",
                "mcqOptions": [
                    {"text": "Mass", "isCorrect": False},
                    {"text": "Velocity", "isCorrect": True},
                    {"text": "Time", "isCorrect": False},
                    {"text": "Energy", "isCorrect": False},
                ],
                "mcqLayout": "grid",
            },
            {
                "text": "Describe the circuit shown.",
                "marks": 6,
                "type": "long",
                "image": {"url": data_url, "caption": "Series circuit"},
            },
            {
                "text": "Label the diagram.",
                "marks": 2,
                "type": "short",
                "image": {"url": "https://example.com/diagram.png"},
            },
        ],
    }


@pytest.fixture
def offline_session():
    session = MagicMock()
    response = MagicMock()
    response.status_code = 404
    session.get.return_value = response
    return session


class TestBuildQuestionPaper:
    def test_full_build(self, payload, offline_session):
        doc = document_from_dict(payload)

        result = build_question_paper(doc, session=offline_session)

        assert result.pdf.startswith(b"%PDF-")
        assert result.total_marks == 14
        assert result.filename == "Unit_Test_1_question_paper.pdf"
        assert len(result.warnings) == 1
        assert "Q4" in result.warnings[0]

        with fitz.open(stream=result.pdf, filetype="pdf") as pdf:
            assert pdf.page_count == result.page_count
            text = "".join(page.get_text() for page in pdf)
            assert len(pdf[0].get_images()) == 1

        for expected in (
            "Example University",
            "Total Marks: 14",
            "Q1. Define force. [5 marks]",
            "A. Mass",
            "D. Energy",
            "Fig: Series circuit",
            "[Image could not be displayed]",
            "Q4. Label the diagram. [2 marks]",
            f"Page 1 of {result.page_count}",
        ):
            assert expected in text

    def test_metadata(self, payload, offline_session):
        result = build_question_paper(document_from_dict(payload), session=offline_session)

        meta = result.metadata
        assert meta["total_marks"] == 14
        assert meta["question_count"] == 4
        assert meta["questions_by_type"] == {"mcq": 1, "short": 2, "long": 1}
        assert meta["images"] == {"total": 2, "failed": 1}
        assert meta["question_pages"]["1"] == [1]
        json.dumps(meta)

    def test_preresolved_images_skip_fetching(self, make_document, short_question):
        session = MagicMock()
        doc = make_document(QuestionBlock("Look.", 1, image=ImageBlock(source="https://example.com/a.png")))

        result = build_question_paper(doc, images={}, session=session)

        session.get.assert_not_called()
        assert len(result.warnings) == 1

    def test_damaged_embedded_image_does_not_abort(self, make_document, damaged_png_bytes):
        doc = make_document(
            QuestionBlock("Study the figure.", 2, image=ImageBlock(data=damaged_png_bytes)),
            QuestionBlock("Next question.", 3),
        )

        result = build_question_paper(doc)

        assert len(result.warnings) == 1
        with fitz.open(stream=result.pdf, filetype="pdf") as pdf:
            text = pdf[0].get_text()
        assert "[Image could not be displayed]" in text
        assert "Q2. Next question. [3 marks]" in text

    def test_invalid_document_raises_validation_error(self, make_document):
        with pytest.raises(ValidationError):
            build_question_paper(make_document())

    def test_render_failure_wrapped(self, make_document, short_question):
        with patch(
            "exam_toolkit.paper_builder.controller.render_to_pdf",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(BuildError, match="disk full"):
                build_question_paper(make_document(short_question))

    def test_standard_mode(self, make_document, short_question):
        result = build_question_paper(
            make_document(short_question),
            LayoutConfig(compact=False),
        )

        assert result.metadata["compact"] is False
        assert result.page_count == 1


class TestBuildResultWrite:
    def test_write_to_directory_uses_filename(self, tmp_path, make_document, short_question):
        result = build_question_paper(make_document(short_question))

        path = result.write(tmp_path)

        assert path == tmp_path / "Unit_Test_1_question_paper.pdf"
        assert path.read_bytes() == result.pdf

    def test_write_to_file_path(self, tmp_path, make_document, short_question):
        result = build_question_paper(make_document(short_question))

        path = result.write(tmp_path / "out" / "paper.pdf")

        assert path.exists()


class TestPaperFilename:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Unit Test 1", "Unit_Test_1_question_paper.pdf"),
            ("Mid  Term\tExam", "Mid_Term_Exam_question_paper.pdf"),
            ("Physics: Forces/Motion?", "Physics_ForcesMotion_question_paper.pdf"),
            ("   ", "paper_question_paper.pdf"),
        ],
    )
    def test_slug(self, title, expected):
        assert paper_filename(title) == expected

    def test_extension(self):
        assert paper_filename("Quiz", ext="docx") == "Quiz_question_paper.docx"
