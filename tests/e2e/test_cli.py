"""
End-to-end tests for the exam-paper command.
"""

import json

import fitz
import pytest

from exam_toolkit.cli import EXIT_INVALID, EXIT_OK, main


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "paper.json"
    path.write_text(
        json.dumps({
            "title": "Weekly Quiz",
            "subject": "Biology",
            "examType": "Quiz",
            "duration": 20,
            "questions": [
                {"text": "Name the powerhouse of the cell.", "marks": 1, "type": "short"},
                {"text": "Explain osmosis.", "marks": 4, "type": "long"},
            ],
        }),
        encoding="utf-8",
    )
    return path


class TestBuildCommand:
    def test_build_to_output_file(self, tmp_path, payload_file, capsys):
        out = tmp_path / "out.pdf"

        code = main(["build", str(payload_file), "-o", str(out)])

        assert code == EXIT_OK
        with fitz.open(out) as pdf:
            text = pdf[0].get_text()
        assert "Total Marks: 5" in text
        assert "Q2. Explain osmosis. [4 marks]" in text
        assert "out.pdf" in capsys.readouterr().out

    def test_default_output_name(self, tmp_path, payload_file, monkeypatch):
        monkeypatch.chdir(tmp_path)

        code = main(["build", str(payload_file)])

        assert code == EXIT_OK
        assert (tmp_path / "Weekly_Quiz_question_paper.pdf").exists()

    def test_layout_config_file(self, tmp_path, payload_file):
        config = tmp_path / "layout.json"
        config.write_text(json.dumps({"margin_left": 25}), encoding="utf-8")

        code = main(["build", str(payload_file), "--config", str(config), "--no-compact", "-o", str(tmp_path)])

        assert code == EXIT_OK

    def test_invalid_payload(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"title": "x", "subject": "y", "examType": "z", "questions": []}))

        assert main(["build", str(path)]) == EXIT_INVALID

    def test_zero_duration_rejected(self, tmp_path, payload_file):
        data = json.loads(payload_file.read_text())
        data["duration"] = 0
        payload_file.write_text(json.dumps(data))

        assert main(["build", str(payload_file), "-o", str(tmp_path / "x.pdf")]) == EXIT_INVALID

    def test_missing_file(self, tmp_path):
        assert main(["build", str(tmp_path / "missing.json")]) == EXIT_INVALID

    def test_unknown_layout_setting(self, tmp_path, payload_file):
        config = tmp_path / "layout.json"
        config.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")

        assert main(["build", str(payload_file), "--config", str(config)]) == EXIT_INVALID
