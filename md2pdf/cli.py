"""Command-line interface for markdown to PDF conversion."""

import argparse
import logging
import sys
from pathlib import Path

from md2pdf.converter import MarkdownConverter
from md2pdf.errors import Md2PdfError
from md2pdf.options import ConversionOptions


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Command-line arguments. Uses sys.argv if None.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="md2pdf",
        description="Convert a markdown document to PDF, resolving relative links and embedding referenced PDFs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Embedding PDFs:
  ![appendix](appendix.pdf)                   Embed all pages
  ![appendix](appendix.pdf){include: [3, 1]}  Embed pages 3 and 1, in that order
  ![appendix](appendix.pdf){skip: [2]}        Embed all pages except page 2

Sizing images:
  ![chart](chart.png){width=300}              Set image width in pixels
  ![chart](chart.png){width=300 height=200}   Set width and height

Examples:
  md2pdf notes.md                          Write notes.pdf next to notes.md
  md2pdf notes.md out/notes.pdf            Write to a specific file
  md2pdf notes.md --theme theme.css        Use a custom stylesheet
        """,
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input markdown file",
    )

    parser.add_argument(
        "output",
        nargs="?",
        type=Path,
        help="Output PDF file (default: input path with .pdf suffix)",
    )

    parser.add_argument(
        "--theme",
        type=Path,
        dest="stylesheet",
        help="CSS file to use instead of the default stylesheet",
    )

    parser.add_argument(
        "--paper-format",
        default="A4",
        help="Paper format for rendered pages (default: A4)",
    )

    parser.add_argument(
        "--no-inline-images",
        action="store_true",
        help="Link local images by absolute path instead of embedding them as data URIs",
    )

    parser.add_argument(
        "--no-math",
        action="store_true",
        help="Do not render $...$ math",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=30000,
        help="Page load timeout for rendering, in milliseconds (default: 30000)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Keep the intermediate HTML next to each rendered PDF segment",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print progress information to stderr",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    return parser.parse_args(args)


def create_options(args: argparse.Namespace) -> ConversionOptions:
    """Create ConversionOptions from parsed arguments.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Configured ConversionOptions object.
    """
    return ConversionOptions(
        stylesheet=args.stylesheet,
        debug=args.debug,
        paper_format=args.paper_format,
        inline_images=not args.no_inline_images,
        enable_math=not args.no_math,
        render_timeout=args.timeout,
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command-line arguments. Uses sys.argv if None.

    Returns:
        Exit code (0 for success, 1 for errors).
    """
    parsed_args = parse_args(args)
    configure_logging(parsed_args.verbose)

    if parsed_args.stylesheet and not parsed_args.stylesheet.exists():
        print(f"Error: Theme file not found: {parsed_args.stylesheet}", file=sys.stderr)
        return 1

    converter = MarkdownConverter(create_options(parsed_args))

    try:
        result = converter.convert_file(parsed_args.input, parsed_args.output)
    except (Md2PdfError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if parsed_args.verbose:
        for path in result.debug_files:
            print(f"  html: {path}", file=sys.stderr)
    print(f"PDF successfully generated at {result.output_path}")
    return 0
