import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import exam_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from exam_toolkit.core.models import (  # noqa: E402
    Document,
    Option,
    OptionLayout,
    OptionsBlock,
    QuestionBlock,
    QuestionKind,
)


def _png_bytes(size=(400, 200), mode="RGB", color="white") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size, color=color).save(buf, format="PNG")
    return buf.getvalue()


# Common test fixtures
@pytest.fixture
def png_bytes() -> bytes:
    """A 400x200 white PNG (2:1 aspect ratio)."""
    return _png_bytes()


@pytest.fixture
def png_factory():
    """Factory for PNG bytes of any size/mode."""
    return _png_bytes


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def make_document():
    """Factory for Documents with sensible header defaults."""
    def _create(*questions: QuestionBlock, **overrides) -> Document:
        fields = dict(
            title="Unit Test 1",
            subject="Physics",
            exam_type="Quiz",
            duration_minutes=30,
            questions=tuple(questions),
        )
        fields.update(overrides)
        return Document(**fields)
    return _create


@pytest.fixture
def short_question() -> QuestionBlock:
    return QuestionBlock(text="Define force.", marks=5, kind=QuestionKind.SHORT)


@pytest.fixture
def mcq_factory():
    """Factory for multiple-choice questions with four options."""
    def _create(
        layout: OptionLayout = OptionLayout.VERTICAL,
        show_correct_answer: bool = False,
        texts=("2", "3", "4", "5"),
        correct: int = 2,
        text: str = "What is 2 + 2?",
    ) -> QuestionBlock:
        return QuestionBlock(
            text=text,
            marks=1,
            kind=QuestionKind.MCQ,
            options=OptionsBlock(
                options=tuple(Option(t, is_correct=(i == correct)) for i, t in enumerate(texts)),
                layout=layout,
                show_correct_answer=show_correct_answer,
            ),
        )
    return _create


@pytest.fixture
def damaged_png_bytes() -> bytes:
    """A PNG whose header parses but whose IDAT chunk fails its checksum."""
    data = bytearray(_png_bytes(size=(20, 20), color="red"))
    idat = data.index(b"IDAT")
    data[idat + 6] ^= 0xFF
    return bytes(data)
