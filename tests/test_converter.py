"""End-to-end tests for MarkdownConverter."""

import logging
from pathlib import Path

import pytest

from md2pdf import ConversionOptions, MarkdownConverter
from md2pdf.converter import cleanup_temp_files
from md2pdf.errors import ConflictingPageOptionsError, EmptyDocumentError, InputEncodingError, RenderError
from md2pdf.render import MarkdownRenderer


class TestConvertFile:
    """Tests for MarkdownConverter.convert_file."""

    def test_consecutive_embeds(self, converter, make_pdf, tmp_path, page_texts):
        """Two embeds contribute 3 + 1 pages in order."""
        make_pdf("1.pdf", 3)
        make_pdf("2.pdf", 2)
        source = tmp_path / "doc.md"
        source.write_text("![a](1.pdf)![b](2.pdf){include:[1]}", encoding="utf-8")

        result = converter.convert_file(source, tmp_path / "out.pdf")

        assert result.page_count == 4
        assert page_texts(tmp_path / "out.pdf") == ["1 page 1", "1 page 2", "1 page 3", "2 page 1"]

    def test_content_and_embeds_interleaved(self, converter, fake_renderer, make_pdf, tmp_path, page_texts):
        """Rendered content and embedded pages keep source order."""
        make_pdf("a.pdf", 3)
        source = tmp_path / "doc.md"
        source.write_text("# Intro\n\n![a](a.pdf){skip: [2]}\n\nOutro\n", encoding="utf-8")

        result = converter.convert_file(source, tmp_path / "out.pdf")

        assert page_texts(result.output_path) == [
            "rendered 0 page 1",
            "a page 1",
            "a page 3",
            "rendered 1 page 1",
        ]
        assert result.segment_count == 3
        assert len(fake_renderer.rendered_html) == 2
        assert "<h1>Intro</h1>" in fake_renderer.rendered_html[0]

    def test_default_output_path(self, converter, make_pdf, tmp_path):
        """Output defaults to the input path with a .pdf suffix."""
        make_pdf("a.pdf", 1)
        source = tmp_path / "notes.md"
        source.write_text("![a](a.pdf)", encoding="utf-8")

        result = converter.convert_file(source)

        assert result.output_path == tmp_path / "notes.pdf"
        assert result.output_path.exists()

    def test_missing_input(self, converter, tmp_path):
        """A missing markdown file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            converter.convert_file(tmp_path / "nope.md")

    def test_non_utf8_input(self, converter, tmp_path):
        """Input that is not UTF-8 raises InputEncodingError."""
        source = tmp_path / "doc.md"
        source.write_bytes(b"caf\xe9")

        with pytest.raises(InputEncodingError, match="UTF-8"):
            converter.convert_file(source, tmp_path / "out.pdf")

        assert not (tmp_path / "out.pdf").exists()

    def test_conflicting_options_no_output(self, converter, fake_renderer, make_pdf, tmp_path):
        """Conflicting directives abort before anything is rendered or written."""
        make_pdf("a.pdf", 2)
        source = tmp_path / "doc.md"
        source.write_text("Intro\n![a](a.pdf){skip: [1], include: [2]}", encoding="utf-8")

        with pytest.raises(ConflictingPageOptionsError):
            converter.convert_file(source, tmp_path / "out.pdf")

        assert not (tmp_path / "out.pdf").exists()
        assert fake_renderer.rendered_html == []

    def test_whitespace_document(self, converter, tmp_path):
        """Whitespace-only documents raise EmptyDocumentError."""
        source = tmp_path / "doc.md"
        source.write_text("  \n\n\t\n", encoding="utf-8")

        with pytest.raises(EmptyDocumentError):
            converter.convert_file(source, tmp_path / "out.pdf")

        assert not (tmp_path / "out.pdf").exists()

    def test_missing_embed_skipped(self, converter, tmp_path, page_texts, caplog):
        """Missing PDFs are skipped with a warning and the rest is written."""
        source = tmp_path / "doc.md"
        source.write_text("Hello\n![gone](gone.pdf)", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            result = converter.convert_file(source, tmp_path / "out.pdf")

        assert page_texts(result.output_path) == ["rendered 0 page 1"]
        assert len(result.warnings) == 1
        assert "gone.pdf" in result.warnings[0]
        assert "gone.pdf" in caplog.text

    def test_temp_files_removed(self, converter, work_dir, tmp_path):
        """Rendered segment PDFs are deleted after a successful build."""
        source = tmp_path / "doc.md"
        source.write_text("Some text", encoding="utf-8")

        converter.convert_file(source, tmp_path / "out.pdf")

        assert list(work_dir.glob("*.pdf")) == []

    def test_temp_files_removed_on_failure(self, failing_renderer, work_dir, make_pdf, tmp_path):
        """Rendered segment PDFs are deleted when the build fails."""
        make_pdf("a.pdf", 1)
        options = ConversionOptions(work_dir=work_dir)
        converter = MarkdownConverter(options, MarkdownRenderer(options), failing_renderer)
        source = tmp_path / "doc.md"
        source.write_text("one ![a](a.pdf) two", encoding="utf-8")

        with pytest.raises(RenderError):
            converter.convert_file(source, tmp_path / "out.pdf")

        assert list(work_dir.glob("*.pdf")) == []
        assert not (tmp_path / "out.pdf").exists()

    def test_injected_renderer_not_closed(self, converter, fake_renderer, tmp_path):
        """A renderer passed in by the caller stays open."""
        source = tmp_path / "doc.md"
        source.write_text("text", encoding="utf-8")

        converter.convert_file(source, tmp_path / "out.pdf")

        assert fake_renderer.closed is False

    def test_debug_directory_kept(self, fake_renderer, make_pdf, tmp_path):
        """In debug mode segments are built next to the output."""
        options = ConversionOptions(debug=True)
        converter = MarkdownConverter(options, MarkdownRenderer(options), fake_renderer)
        source = tmp_path / "doc.md"
        source.write_text("text", encoding="utf-8")

        result = converter.convert_file(source, tmp_path / "out.pdf")

        assert (tmp_path / "out.debug").is_dir()
        assert result.debug_files == [tmp_path / "out.debug" / "segment-000.html"]
        assert list((tmp_path / "out.debug").glob("*.pdf")) == []


class TestConvertText:
    """Tests for MarkdownConverter.convert_text."""

    def test_embeds_resolve_against_base_dir(self, converter, make_pdf, tmp_path, page_texts):
        """Embeds resolve against the given base directory."""
        make_pdf("docs/a.pdf", 2)

        result = converter.convert_text("![a](a.pdf){include: [2]}", tmp_path / "out.pdf", tmp_path / "docs")

        assert page_texts(result.output_path) == ["a page 2"]


class TestCleanupTempFiles:
    """Tests for cleanup_temp_files."""

    def test_deletes_files(self, tmp_path):
        """Existing and already-missing files are handled."""
        present = tmp_path / "a.pdf"
        present.write_bytes(b"x")

        assert cleanup_temp_files([present, tmp_path / "missing.pdf"]) == []
        assert not present.exists()

    def test_failure_is_warning(self, tmp_path, caplog):
        """Deletion failures are logged and returned, not raised."""
        directory = tmp_path / "dir.pdf"
        directory.mkdir()

        with caplog.at_level(logging.WARNING):
            failed = cleanup_temp_files([directory])

        assert failed == [Path(directory)]
        assert "Could not delete temporary file" in caplog.text
