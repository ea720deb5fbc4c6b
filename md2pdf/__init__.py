"""Markdown to PDF converter with inline PDF embedding."""

from md2pdf.converter import ConversionResult, MarkdownConverter
from md2pdf.options import ConversionOptions
from md2pdf.segmenter import ContentSegment, EmbedSegment, segment
from md2pdf.selection import AllPages, IncludePages, SkipPages, select_pages

__all__ = [
    "MarkdownConverter",
    "ConversionOptions",
    "ConversionResult",
    "ContentSegment",
    "EmbedSegment",
    "AllPages",
    "IncludePages",
    "SkipPages",
    "segment",
    "select_pages",
]
__version__ = "0.1.0"
