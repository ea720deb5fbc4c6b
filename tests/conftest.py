"""Pytest configuration and shared fixtures."""

import pathlib

import fitz  # PyMuPDF
import pytest

from md2pdf import ConversionOptions, MarkdownConverter
from md2pdf.errors import RenderError
from md2pdf.render import MarkdownRenderer


def write_pdf(path, page_count, label="doc"):
    """Write a PDF whose pages read "<label> page <n>"."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = fitz.open()
    for i in range(page_count):
        page = doc.new_page()
        page.insert_text((72, 72), f"{label} page {i + 1}")
    doc.save(str(path))
    doc.close()
    return path


def read_page_texts(path):
    """Return the stripped text of every page of a PDF."""
    with fitz.open(str(path)) as doc:
        return [page.get_text().strip() for page in doc]


class FakePdfRenderer:
    """Stands in for the browser: writes a one-page PDF per render call."""

    def __init__(self, fail_on=None):
        self.rendered_html = []
        self.closed = False
        self.fail_on = fail_on

    def render(self, html, output_path):
        index = len(self.rendered_html)
        self.rendered_html.append(html)
        if self.fail_on is not None and index == self.fail_on:
            raise RenderError(f"Failed to render {output_path.name}: boom")
        write_pdf(output_path, 1, label=f"rendered {index}")
        return output_path

    def close(self):
        self.closed = True


@pytest.fixture
def make_pdf(tmp_path):
    """Return a factory that writes labelled PDFs into tmp_path."""

    def factory(name, page_count, label=None):
        return write_pdf(tmp_path / name, page_count, label or pathlib.Path(name).stem)

    return factory


@pytest.fixture
def fake_renderer():
    """Return a FakePdfRenderer."""
    return FakePdfRenderer()


@pytest.fixture
def work_dir(tmp_path):
    """Return a scratch directory for rendered segments."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def converter(fake_renderer, work_dir):
    """Return a MarkdownConverter that renders with FakePdfRenderer."""
    options = ConversionOptions(work_dir=work_dir)
    return MarkdownConverter(options, MarkdownRenderer(options), fake_renderer)


@pytest.fixture
def failing_renderer():
    """Return a FakePdfRenderer that fails on its second render."""
    return FakePdfRenderer(fail_on=1)


@pytest.fixture
def page_texts():
    """Return a helper that reads the text of every page of a PDF."""
    return read_page_texts
