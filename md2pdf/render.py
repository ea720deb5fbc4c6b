"""Markdown to HTML and HTML to PDF rendering."""

import html as html_lib
import logging
import re
from pathlib import Path

from markdown_it import MarkdownIt
from mdit_py_plugins.attrs import attrs_block_plugin, attrs_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from md2pdf.errors import RenderError
from md2pdf.options import ConversionOptions

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
BASE_TEMPLATE = TEMPLATES_DIR / "base.html"
DEFAULT_STYLESHEET = TEMPLATES_DIR / "styles" / "default.css"

MATHJAX_URL = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-svg.js"
PAGE_BREAK_HTML = '<div style="page-break-after: always;"></div>'
MATH_MARKER = 'class="math'
MATHJAX_READY = "() => window.MathJax && MathJax.startup.promise"


def _render_math(content: str, options: dict) -> str:
    """Emit TeX with MathJax delimiters for the page script to typeset."""
    escaped = html_lib.escape(content)
    if options.get("display_mode"):
        return f"\\[{escaped}\\]"
    return f"\\({escaped}\\)"


class MarkdownRenderer:
    """Converts markdown to a standalone HTML document."""

    PAGE_BREAK_PATTERN = re.compile(r"\\pagebreak\b")

    def __init__(self, options: ConversionOptions | None = None):
        """Initialize the renderer and its markdown parser.

        Args:
            options: Conversion options. Uses defaults if not provided.
        """
        self.options = options or ConversionOptions()
        self._md = self._build_parser()
        self._template: str | None = None
        self._stylesheet: str | None = None

    def _build_parser(self) -> MarkdownIt:
        md = MarkdownIt(
            "gfm-like",
            {
                "html": True,
                "breaks": self.options.breaks,
                "typographer": self.options.typographer,
                "xhtmlOut": True,
            },
        )
        if self.options.typographer:
            md.enable(["replacements", "smartquotes"])
        if self.options.enable_math:
            md.use(
                dollarmath_plugin,
                allow_space=False,
                allow_digits=False,
                renderer=_render_math,
            )
        if self.options.enable_attrs:
            md.use(attrs_plugin).use(attrs_block_plugin)
        return md

    def to_html(self, markdown: str) -> str:
        """Render markdown to an HTML fragment.

        ``\\pagebreak`` markers become forced page breaks.

        Args:
            markdown: Markdown content.

        Returns:
            HTML fragment.
        """
        markdown = self.PAGE_BREAK_PATTERN.sub(lambda _: PAGE_BREAK_HTML, markdown)
        try:
            return self._md.render(markdown)
        except Exception as e:
            raise RenderError(f"Failed to render markdown: {e}") from e

    def render(self, markdown: str, base_dir: Path) -> str:
        """Render markdown to a complete HTML document.

        Args:
            markdown: Markdown content with links already resolved.
            base_dir: Directory that remaining relative URLs resolve against.

        Returns:
            HTML document with the stylesheet inlined.
        """
        body = self.to_html(markdown)
        scripts = ""
        if self.options.enable_math and MATH_MARKER in body:
            scripts = f'<script src="{MATHJAX_URL}"></script>'

        base_href = Path(base_dir).resolve().as_uri() + "/"
        return (
            self._load_template()
            .replace("{{base}}", html_lib.escape(base_href, quote=True))
            .replace("{{css}}", self._load_stylesheet())
            .replace("{{scripts}}", scripts)
            .replace("{{content}}", body)
        )

    def _load_template(self) -> str:
        if self._template is None:
            self._template = BASE_TEMPLATE.read_text(encoding="utf-8")
        return self._template

    def _load_stylesheet(self) -> str:
        """Read the configured stylesheet, falling back to the bundled one."""
        if self._stylesheet is None:
            path = Path(self.options.stylesheet) if self.options.stylesheet else DEFAULT_STYLESHEET
            try:
                self._stylesheet = path.read_text(encoding="utf-8")
            except OSError as e:
                raise RenderError(f"Could not read stylesheet {path}: {e}") from e
        return self._stylesheet


class BrowserPdfRenderer:
    """Prints HTML documents to PDF with headless Chromium.

    The browser is started on the first render and reused until close().
    """

    def __init__(self, options: ConversionOptions | None = None):
        self.options = options or ConversionOptions()
        self._playwright = None
        self._browser = None

    def __enter__(self) -> "BrowserPdfRenderer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_browser(self):
        if self._browser is None:
            logger.debug("Launching headless browser")
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=True)
        return self._browser

    def render(self, html: str, output_path: Path) -> Path:
        """Print an HTML document to a PDF file.

        The HTML is written next to the PDF and loaded from disk so local
        ``file://`` resources resolve. It is removed afterwards unless the
        debug option is set.

        Args:
            html: Complete HTML document.
            output_path: Path of the PDF to create.

        Returns:
            Path of the written PDF.

        Raises:
            RenderError: If the browser fails or times out.
        """
        output_path = Path(output_path)
        html_path = output_path.with_suffix(".html")
        html_path.write_text(html, encoding="utf-8")

        try:
            browser = self._ensure_browser()
            page = browser.new_page()
            try:
                page.goto(
                    html_path.resolve().as_uri(),
                    wait_until="networkidle",
                    timeout=self.options.render_timeout,
                )
                if MATH_MARKER in html:
                    page.evaluate(MATHJAX_READY)
                page.pdf(
                    path=str(output_path),
                    format=self.options.paper_format,
                    print_background=self.options.print_background,
                )
            finally:
                page.close()
        except PlaywrightError as e:
            raise RenderError(f"Failed to render {output_path.name}: {e}") from e
        finally:
            if not self.options.debug:
                html_path.unlink(missing_ok=True)

        logger.debug("Rendered %s", output_path)
        return output_path

    def close(self) -> None:
        """Shut down the browser if it was started."""
        browser, pw = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        if browser is not None:
            browser.close()
        if pw is not None:
            pw.stop()
