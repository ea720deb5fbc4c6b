"""Configuration for markdown to PDF conversion."""

from dataclasses import dataclass
from pathlib import Path

from md2pdf.links import MAX_INLINE_BYTES


@dataclass
class ConversionOptions:
    """Configuration options for markdown to PDF conversion."""

    stylesheet: Path | None = None  # Replaces the bundled default.css.
    debug: bool = False  # Keep the intermediate HTML of each rendered segment.
    paper_format: str = "A4"
    print_background: bool = True
    inline_images: bool = True
    inline_image_limit: int = MAX_INLINE_BYTES
    enable_math: bool = True
    enable_attrs: bool = True
    breaks: bool = True
    typographer: bool = True
    render_timeout: float = 30000  # Milliseconds, passed to the browser.
    work_dir: Path | None = None
