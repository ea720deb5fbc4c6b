"""Load selected PDF pages and merge them into one document."""

import logging
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

from md2pdf.errors import EmptyDocumentError, MergeError
from md2pdf.selection import AllPages, PageSelection, select_pages

logger = logging.getLogger(__name__)


@dataclass
class ResolvedSource:
    """A loaded document paired with the ordered pages to copy from it."""

    document: fitz.Document
    page_indices: list[int]
    path: Path | None = None
    temporary: bool = False  # Generated during the build and deleted after it.

    def close(self) -> None:
        if not self.document.is_closed:
            self.document.close()


def load_source(path: str | Path, selection: PageSelection | None = None, temporary: bool = False) -> ResolvedSource:
    """Open a PDF and apply a page selection to it.

    Args:
        path: Path to the PDF file.
        selection: Pages to keep. All pages if not provided.
        temporary: Whether the file was generated during this build.

    Returns:
        ResolvedSource holding the open document.

    Raises:
        MergeError: If the file cannot be opened as a PDF.
    """
    path = Path(path)
    try:
        document = fitz.open(str(path), filetype="pdf")
    except Exception as e:
        raise MergeError(f"Could not open PDF {path}: {e}") from e

    indices = select_pages(selection or AllPages(), document.page_count)
    logger.debug("Selected %d of %d pages from %s", len(indices), document.page_count, path)
    return ResolvedSource(document=document, page_indices=indices, path=path, temporary=temporary)


def _page_runs(indices: list[int]) -> list[tuple[int, int]]:
    """Group indices into runs of consecutive ascending pages.

    Args:
        indices: Ordered 0-indexed page numbers.

    Returns:
        List of inclusive (start, end) ranges covering indices in order.
    """
    runs: list[tuple[int, int]] = []
    for idx in indices:
        if runs and idx == runs[-1][1] + 1:
            runs[-1] = (runs[-1][0], idx)
        else:
            runs.append((idx, idx))
    return runs


def merge(sources: list[ResolvedSource]) -> bytes:
    """Concatenate the selected pages of every source into one PDF.

    Pages are appended in source order and, within a source, in the order of
    its page_indices. Input documents are not modified.

    Args:
        sources: Ordered sources to merge.

    Returns:
        The merged PDF as bytes.

    Raises:
        EmptyDocumentError: If no pages were selected at all.
        MergeError: If PyMuPDF fails to copy or save pages.
    """
    output = fitz.open()
    try:
        for source in sources:
            for start, end in _page_runs(source.page_indices):
                try:
                    output.insert_pdf(source.document, from_page=start, to_page=end)
                except Exception as e:
                    name = source.path or "document"
                    raise MergeError(f"Could not copy pages {start + 1}-{end + 1} from {name}: {e}") from e

        if output.page_count == 0:
            raise EmptyDocumentError("No pages selected from any source.")

        try:
            return output.tobytes(garbage=3, deflate=True)
        except Exception as e:
            raise MergeError(f"Could not save merged PDF: {e}") from e
    finally:
        output.close()


def merge_to_file(sources: list[ResolvedSource], output_path: str | Path) -> int:
    """Merge sources and write the result to a file.

    Args:
        sources: Ordered sources to merge.
        output_path: Destination PDF path. Parent directories are created.

    Returns:
        Number of pages written.
    """
    data = merge(sources)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    return sum(len(source.page_indices) for source in sources)
