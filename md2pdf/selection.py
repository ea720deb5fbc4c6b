"""Page selection for embedded PDFs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AllPages:
    """Keep every page of the source document."""


@dataclass(frozen=True)
class IncludePages:
    """Keep only the listed 1-indexed pages, in the listed order."""

    pages: tuple[int, ...]


@dataclass(frozen=True)
class SkipPages:
    """Keep every page except the listed 1-indexed pages."""

    pages: tuple[int, ...]


PageSelection = AllPages | IncludePages | SkipPages


def select_pages(selection: PageSelection, page_count: int) -> list[int]:
    """Compute the 0-indexed pages to copy from a document.

    Include lists keep the caller's order and duplicates; pages outside the
    document are dropped silently. Skip lists use set semantics and keep the
    original page order.

    Args:
        selection: Page selection parsed from an embed directive.
        page_count: Total number of pages in the source document.

    Returns:
        Ordered list of 0-indexed page numbers.
    """
    if page_count < 0:
        raise ValueError(f"Page count must be non-negative, got {page_count}")

    if isinstance(selection, AllPages):
        return list(range(page_count))

    if isinstance(selection, IncludePages):
        indices = [page - 1 for page in selection.pages]
        return [idx for idx in indices if 0 <= idx < page_count]

    if isinstance(selection, SkipPages):
        skipped = {page - 1 for page in selection.pages}
        return [idx for idx in range(page_count) if idx not in skipped]

    raise TypeError(f"Unknown page selection: {selection!r}")
