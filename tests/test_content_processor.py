"""Tests for per-file rendering and the analysis file format."""

import pytest
from unittest.mock import patch

from repo2ctx.core.content_processor import ContentProcessor
from repo2ctx.core.models import AnalysisResult, FileAnalysisEntry, ProcessOptions


class TestRenderFile:
    @pytest.fixture
    def processor(self, token_counter):
        return ContentProcessor(token_counter)

    def test_text_block_with_token_count(self, processor, tmp_path):
        path = tmp_path / "app.js"
        path.write_text("let a = 1;", encoding="utf-8")

        block = processor.render_file(str(path), "src/app.js")

        assert block == "######\nsrc/app.js (4 tokens)\n######\n\n```\nlet a = 1;\n```\n\n"

    def test_text_block_without_token_count(self, processor, tmp_path):
        path = tmp_path / "app.js"
        path.write_text("x", encoding="utf-8")

        block = processor.render_file(str(path), "app.js", ProcessOptions(show_token_count=False))

        assert block.startswith("######\napp.js\n######\n\n")

    def test_binary_block(self, processor, tmp_path):
        path = tmp_path / "logo.png"
        path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 2040)

        block = processor.render_file(str(path), "assets/logo.png")

        assert block == (
            "######\nassets/logo.png (binary file)\n######\n\n"
            "File type: PNG\nSize: 2.00 KB\n\n"
        )

    def test_binary_content_is_not_read_as_text(self, processor, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"abc\x00def")

        with patch.object(processor, 'render_text') as mock_render_text:
            block = processor.render_file(str(path), "data.bin")

        mock_render_text.assert_not_called()
        assert "(binary file)" in block
        assert "File type: BIN" in block

    def test_missing_file_returns_none(self, processor, tmp_path):
        assert processor.render_file(str(tmp_path / "missing.js"), "missing.js") is None

    def test_read_error_returns_none(self, processor, tmp_path):
        path = tmp_path / "a.js"
        path.write_text("x")

        with patch('builtins.open', side_effect=PermissionError("Access denied")):
            assert processor.render_file(str(path), "a.js") is None


class TestAnalysisFormat:
    def test_format_analysis(self):
        result = AnalysisResult(
            files_info=[FileAnalysisEntry("b.js", 9), FileAnalysisEntry("a.js", 3)],
            total_tokens=12,
        )

        assert ContentProcessor.format_analysis(result) == "b.js\n9\na.js\n3\nTotal tokens: 12\n"

    def test_read_analysis(self):
        lines = ["src\\b.js", "9", "a.js ", " 3", "Total tokens: 12", ""]

        entries = ContentProcessor.read_analysis(lines)

        assert entries == [FileAnalysisEntry("src/b.js", 9), FileAnalysisEntry("a.js", 3)]

    def test_read_analysis_skips_bad_counts(self):
        lines = ["a.js", "many", "b.js", "2", "Total tokens: 2"]

        assert ContentProcessor.read_analysis(lines) == [FileAnalysisEntry("b.js", 2)]

    def test_read_analysis_stops_at_total(self):
        lines = ["Total tokens: 0", "a.js", "1"]

        assert ContentProcessor.read_analysis(lines) == []

    def test_read_analysis_file_round_trip(self, tmp_path):
        result = AnalysisResult(
            files_info=[FileAnalysisEntry("src/main.py", 40), FileAnalysisEntry("README.md", 7)],
            total_tokens=47,
        )
        path = tmp_path / "analysis.txt"
        path.write_text(ContentProcessor.format_analysis(result), encoding="utf-8")

        assert ContentProcessor.read_analysis_file(str(path)) == result.files_info

    def test_read_missing_analysis_file(self, tmp_path):
        assert ContentProcessor.read_analysis_file(str(tmp_path / "nope.txt")) == []
