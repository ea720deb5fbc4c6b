"""Split markdown into content spans and PDF embed directives."""

import re
from dataclasses import dataclass, field
from urllib.parse import unquote

from md2pdf.errors import ConflictingPageOptionsError
from md2pdf.selection import AllPages, IncludePages, PageSelection, SkipPages


@dataclass(frozen=True)
class ContentSegment:
    """A span of markdown to be rendered."""

    text: str

    @property
    def markdown(self) -> str:
        return self.text

    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class EmbedSegment:
    """A reference to an external PDF with its page selection."""

    reference: str
    selection: PageSelection = field(default_factory=AllPages)
    source: str = field(default="", compare=False)
    alt: str = field(default="", compare=False)

    @property
    def markdown(self) -> str:
        return self.source


Segment = ContentSegment | EmbedSegment


class Segmenter:
    """Scans markdown for PDF embed directives.

    A directive is an image link whose target ends in ``.pdf`` (optionally
    followed by a query or fragment), optionally followed directly by an
    option block such as ``{skip: [1, 2]}`` or ``{include: [3]}``.
    """

    DIRECTIVE_PATTERN = re.compile(
        r"!\[(?P<alt>[^\]\n]*)\]"
        r"\((?P<target>[^)?#\n]*?\.pdf(?:[?#][^)\n]*)?)\)"
        r"(?:\{(?P<options>[^{}]*)\})?",
        re.IGNORECASE,
    )
    SKIP_PATTERN = re.compile(r"\bskip\s*:\s*\[([^\]]*)\]", re.IGNORECASE)
    INCLUDE_PATTERN = re.compile(r"\binclude\s*:\s*\[([^\]]*)\]", re.IGNORECASE)
    PAGE_NUMBER_PATTERN = re.compile(r"[0-9]+")

    def segment(self, markdown: str) -> list[Segment]:
        """Partition markdown into ordered content and embed segments.

        Joining the ``markdown`` of every returned segment reproduces the
        input exactly.

        Args:
            markdown: Raw markdown source.

        Returns:
            Ordered list of segments.

        Raises:
            ConflictingPageOptionsError: If a directive has both skip and
                include lists.
        """
        segments: list[Segment] = []
        cursor = 0

        for match in self.DIRECTIVE_PATTERN.finditer(markdown):
            if match.start() > cursor:
                segments.append(ContentSegment(markdown[cursor:match.start()]))
            segments.append(self._build_embed(match))
            cursor = match.end()

        if cursor < len(markdown):
            segments.append(ContentSegment(markdown[cursor:]))

        return segments

    def _build_embed(self, match: re.Match) -> EmbedSegment:
        """Create an EmbedSegment from a directive match.

        Args:
            match: Match of DIRECTIVE_PATTERN.

        Returns:
            EmbedSegment with decoded reference and parsed selection.
        """
        reference = self._decode_reference(match.group("target"))
        selection = self.parse_options(match.group("options"), reference)
        return EmbedSegment(
            reference=reference,
            selection=selection,
            source=match.group(0),
            alt=match.group("alt"),
        )

    @staticmethod
    def _decode_reference(target: str) -> str:
        # Query and fragment are split off before decoding so "%23" stays in the path.
        path = re.split(r"[?#]", target.strip(), maxsplit=1)[0]
        return unquote(path)

    def parse_options(self, options: str | None, reference: str = "") -> PageSelection:
        """Parse the text of an option block into a page selection.

        Args:
            options: Text between the braces, or None if there was no block.
            reference: Embed reference, used in error messages.

        Returns:
            The parsed PageSelection. Blocks without usable page numbers
            select all pages.

        Raises:
            ConflictingPageOptionsError: If both skip and include are present.
        """
        if not options or not options.strip():
            return AllPages()

        skip_match = self.SKIP_PATTERN.search(options)
        include_match = self.INCLUDE_PATTERN.search(options)

        if skip_match and include_match:
            raise ConflictingPageOptionsError(reference)

        if include_match:
            pages = self._parse_page_list(include_match.group(1))
            if pages:
                return IncludePages(pages)
        elif skip_match:
            pages = self._parse_page_list(skip_match.group(1))
            if pages:
                return SkipPages(pages)

        return AllPages()

    def _parse_page_list(self, text: str) -> tuple[int, ...]:
        """Parse a comma-separated page list, dropping invalid tokens."""
        pages = []
        for token in text.split(","):
            token = token.strip()
            if self.PAGE_NUMBER_PATTERN.fullmatch(token):
                page = int(token)
                if page > 0:
                    pages.append(page)
        return tuple(pages)


_default_segmenter = Segmenter()


def segment(markdown: str) -> list[Segment]:
    """Partition markdown using the default Segmenter."""
    return _default_segmenter.segment(markdown)
