"""Exceptions raised while building a PDF from markdown."""


class Md2PdfError(Exception):
    """Base class for all md2pdf errors."""


class ConflictingPageOptionsError(Md2PdfError, ValueError):
    """Raised when an embed directive specifies both skip and include pages."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Cannot specify both 'skip' and 'include' options for PDF: {reference}")


class EmptyDocumentError(Md2PdfError):
    """Raised when a document produces no content to write."""

    def __init__(self, message: str = "No valid content or PDFs to process."):
        super().__init__(message)


class MissingEmbedError(Md2PdfError):
    """Raised when an embedded PDF cannot be found or read."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"PDF file not found: {path}")


class RenderError(Md2PdfError):
    """Raised when markdown or HTML cannot be rendered to PDF."""


class MergeError(Md2PdfError):
    """Raised when PDF pages cannot be loaded, copied, or saved."""


class InputEncodingError(Md2PdfError):
    """Raised when the markdown input is not valid UTF-8."""
