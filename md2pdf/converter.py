"""Build a single PDF from a markdown document with embedded PDFs."""

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from md2pdf.assembler import Assembler
from md2pdf.errors import InputEncodingError
from md2pdf.merger import ResolvedSource, merge_to_file
from md2pdf.options import ConversionOptions
from md2pdf.render import BrowserPdfRenderer, MarkdownRenderer
from md2pdf.segmenter import Segmenter

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Summary of a completed build."""

    output_path: Path
    page_count: int
    segment_count: int
    warnings: list[str] = field(default_factory=list)
    debug_files: list[Path] = field(default_factory=list)


def cleanup_temp_files(paths: list[Path]) -> list[Path]:
    """Delete temporary files, logging failures instead of raising.

    Args:
        paths: Files created during a build.

    Returns:
        Paths that could not be deleted.
    """
    failed = []
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not delete temporary file %s: %s", path, e)
            failed.append(Path(path))
    return failed


class MarkdownConverter:
    """Converts markdown documents with PDF embeds to a single PDF."""

    def __init__(
        self,
        options: ConversionOptions | None = None,
        markdown_renderer: MarkdownRenderer | None = None,
        pdf_renderer: BrowserPdfRenderer | None = None,
    ):
        """Initialize the converter with optional configuration.

        Args:
            options: Conversion options. Uses defaults if not provided.
            markdown_renderer: Markdown to HTML renderer. Built from options
                if not provided.
            pdf_renderer: HTML to PDF renderer. A headless browser renderer is
                started and closed per build if not provided.
        """
        self.options = options or ConversionOptions()
        self.segmenter = Segmenter()
        self.markdown_renderer = markdown_renderer or MarkdownRenderer(self.options)
        self._pdf_renderer = pdf_renderer

    def convert_file(self, input_path: str | Path, output_path: str | Path | None = None) -> ConversionResult:
        """Convert a markdown file to PDF.

        Args:
            input_path: Path to the UTF-8 markdown file.
            output_path: Destination PDF. Defaults to the input path with a
                ``.pdf`` suffix.

        Returns:
            ConversionResult describing the written file.

        Raises:
            FileNotFoundError: If the input file does not exist.
            InputEncodingError: If the input file is not valid UTF-8.
        """
        input_path = Path(input_path)
        if not input_path.exists():
            raise FileNotFoundError(f"Markdown file not found: {input_path}")

        output_path = Path(output_path) if output_path else input_path.with_suffix(".pdf")
        try:
            markdown = input_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise InputEncodingError(
                f"Could not decode {input_path} as UTF-8: {e.reason} at byte {e.start}"
            ) from e
        return self._build(markdown, input_path, output_path)

    def convert_text(
        self, markdown: str, output_path: str | Path, base_dir: str | Path = "."
    ) -> ConversionResult:
        """Convert in-memory markdown to PDF.

        Args:
            markdown: Markdown source.
            output_path: Destination PDF.
            base_dir: Directory that embeds and relative links resolve against.

        Returns:
            ConversionResult describing the written file.
        """
        return self._build(markdown, Path(base_dir) / "document.md", Path(output_path))

    def _build(self, markdown: str, input_path: Path, output_path: Path) -> ConversionResult:
        # Segment eagerly so malformed directives fail before any file is touched.
        segments = self.segmenter.segment(markdown)
        logger.info("Found %d segments in %s", len(segments), input_path)

        owns_renderer = self._pdf_renderer is None
        pdf_renderer = self._pdf_renderer or BrowserPdfRenderer(self.options)
        assembler = Assembler(self.options, self.markdown_renderer, pdf_renderer)

        with self._work_dir(output_path) as work_dir:
            sources: list[ResolvedSource] = []
            try:
                sources = assembler.assemble(segments, input_path, work_dir)
                page_count = merge_to_file(sources, output_path)
            finally:
                for source in sources:
                    source.close()
                if owns_renderer:
                    pdf_renderer.close()
                failed = cleanup_temp_files(assembler.temp_files)
                assembler.warnings.extend(f"Could not delete temporary file {path}" for path in failed)

        logger.info("Wrote %d pages to %s", page_count, output_path)
        return ConversionResult(
            output_path=output_path,
            page_count=page_count,
            segment_count=len(segments),
            warnings=list(assembler.warnings),
            debug_files=list(assembler.debug_files),
        )

    @contextmanager
    def _work_dir(self, output_path: Path) -> Iterator[Path]:
        """Provide the directory for this build's rendered segments.

        A configured work_dir is used as is. In debug mode the directory sits
        next to the output and is kept. Otherwise a fresh temporary directory
        is created and removed afterwards.
        """
        if self.options.work_dir:
            work_dir = Path(self.options.work_dir)
            work_dir.mkdir(parents=True, exist_ok=True)
            yield work_dir
        elif self.options.debug:
            work_dir = output_path.with_name(output_path.stem + ".debug")
            work_dir.mkdir(parents=True, exist_ok=True)
            yield work_dir
        else:
            with tempfile.TemporaryDirectory(prefix="md2pdf-") as tmpdir:
                yield Path(tmpdir)
