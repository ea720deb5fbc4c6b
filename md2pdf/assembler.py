"""Turn segments into the ordered sources of the output document."""

import logging
import os
from pathlib import Path

from md2pdf.errors import EmptyDocumentError, MissingEmbedError
from md2pdf.links import resolve_links
from md2pdf.merger import ResolvedSource, load_source
from md2pdf.options import ConversionOptions
from md2pdf.render import BrowserPdfRenderer, MarkdownRenderer
from md2pdf.segmenter import ContentSegment, EmbedSegment, Segment

logger = logging.getLogger(__name__)


class Assembler:
    """Resolves embeds and renders content segments, preserving order."""

    def __init__(
        self,
        options: ConversionOptions | None = None,
        markdown_renderer: MarkdownRenderer | None = None,
        pdf_renderer: BrowserPdfRenderer | None = None,
    ):
        """Initialize the assembler.

        Args:
            options: Conversion options. Uses defaults if not provided.
            markdown_renderer: Converts markdown to HTML documents.
            pdf_renderer: Prints HTML documents to PDF files.
        """
        self.options = options or ConversionOptions()
        self.markdown_renderer = markdown_renderer or MarkdownRenderer(self.options)
        self.pdf_renderer = pdf_renderer or BrowserPdfRenderer(self.options)
        self.warnings: list[str] = []
        self.debug_files: list[Path] = []
        self.temp_files: list[Path] = []
        self._render_counter = 0

    def assemble(self, segments: list[Segment], input_path: str | Path, work_dir: str | Path) -> list[ResolvedSource]:
        """Resolve every segment to a source, in segment order.

        Missing embeds are dropped with a warning. Blank content is dropped.

        Args:
            segments: Output of the segmenter.
            input_path: Path of the markdown file; references resolve
                against its directory.
            work_dir: Directory for rendered segment PDFs.

        Returns:
            Ordered list of resolved sources.

        Raises:
            EmptyDocumentError: If no segment produced a source.
        """
        base_dir = Path(input_path).parent
        work_dir = Path(work_dir)
        work_dir.mkdir(parents=True, exist_ok=True)

        sources: list[ResolvedSource] = []
        try:
            for segment in segments:
                source = self._resolve_segment(segment, base_dir, work_dir)
                if source is not None:
                    sources.append(source)
        except BaseException:
            for source in sources:
                source.close()
            raise

        if not sources:
            raise EmptyDocumentError()

        logger.info("Assembled %d sources from %d segments", len(sources), len(segments))
        return sources

    def _resolve_segment(self, segment: Segment, base_dir: Path, work_dir: Path) -> ResolvedSource | None:
        if isinstance(segment, EmbedSegment):
            try:
                return self._resolve_embed(segment, base_dir)
            except MissingEmbedError as e:
                self._warn(f"{e}. Skipping...")
                return None

        if isinstance(segment, ContentSegment):
            if segment.is_blank():
                return None
            return self._render_content(segment, base_dir, work_dir)

        raise TypeError(f"Unknown segment: {segment!r}")

    def _resolve_embed(self, segment: EmbedSegment, base_dir: Path) -> ResolvedSource:
        """Load an embedded PDF and apply its page selection.

        Args:
            segment: Embed directive.
            base_dir: Directory of the markdown file.

        Returns:
            ResolvedSource for the referenced PDF.

        Raises:
            MissingEmbedError: If the file does not exist or is not readable.
        """
        pdf_path = Path(os.path.abspath(base_dir / segment.reference))
        if not pdf_path.is_file() or not os.access(pdf_path, os.R_OK):
            raise MissingEmbedError(_display_path(pdf_path))

        logger.debug("Embedding %s with %s", pdf_path, segment.selection)
        return load_source(pdf_path, segment.selection)

    def _render_content(self, segment: ContentSegment, base_dir: Path, work_dir: Path) -> ResolvedSource:
        """Render a markdown span to a temporary PDF.

        Args:
            segment: Content to render.
            base_dir: Directory relative links resolve against.
            work_dir: Directory for the rendered PDF.

        Returns:
            Temporary ResolvedSource covering all rendered pages.
        """
        resolved = resolve_links(
            segment.text,
            base_dir,
            inline_images=self.options.inline_images,
            inline_limit=self.options.inline_image_limit,
        )
        html = self.markdown_renderer.render(resolved, base_dir)

        pdf_path = work_dir / f"segment-{self._render_counter:03d}.pdf"
        self._render_counter += 1
        self.temp_files.append(pdf_path)
        self.pdf_renderer.render(html, pdf_path)

        if self.options.debug:
            self.debug_files.append(pdf_path.with_suffix(".html"))

        return load_source(pdf_path, temporary=True)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)


def _display_path(path: Path) -> str:
    """Show a path relative to the working directory when possible."""
    try:
        return os.path.relpath(path)
    except ValueError:
        return str(path)
