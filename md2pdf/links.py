"""Resolve relative markdown link targets for rendering."""

import base64
import logging
import mimetypes
import os
import re
from pathlib import Path
from urllib.parse import unquote

logger = logging.getLogger(__name__)

# Local images up to this size are embedded as data URIs.
MAX_INLINE_BYTES = 2 * 1024 * 1024

LINK_PATTERN = re.compile(
    r"(?P<bang>!?)\[(?P<text>[^\]\n]*)\]"
    r"\((?P<url>[^)\s]+)(?P<title>\s+\"[^\"\n]*\")?\)"
)
SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")
PDF_PATTERN = re.compile(r"\.pdf($|[?#])", re.IGNORECASE)

IMAGE_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
}


def is_absolute_target(url: str) -> bool:
    """Return True if a link target needs no resolution."""
    return url.startswith(("/", "#")) or bool(SCHEME_PATTERN.match(url))


def _split_suffix(url: str) -> tuple[str, str]:
    """Split a URL into its path and its ``?query#fragment`` suffix."""
    match = re.search(r"[?#]", url)
    if not match:
        return url, ""
    return url[:match.start()], url[match.start():]


def to_file_url(url: str, base_dir: Path) -> str:
    """Resolve a relative target against base_dir as an absolute file URL.

    Args:
        url: Relative link target, possibly percent-encoded.
        base_dir: Directory the target is relative to.

    Returns:
        A ``file://`` URL with the original query and fragment kept.
    """
    path, suffix = _split_suffix(url)
    resolved = os.path.abspath(os.path.join(str(base_dir), unquote(path)))
    return Path(resolved).as_uri() + suffix


def image_data_uri(url: str, base_dir: Path, max_bytes: int = MAX_INLINE_BYTES) -> str | None:
    """Read a local image as a base64 data URI.

    Args:
        url: Relative image target.
        base_dir: Directory the target is relative to.
        max_bytes: Size ceiling for inlining.

    Returns:
        The data URI, or None if the file is missing, too large, or unreadable.
    """
    path, _ = _split_suffix(url)
    file_path = Path(base_dir) / unquote(path)

    try:
        if not file_path.is_file() or file_path.stat().st_size > max_bytes:
            return None
        data = file_path.read_bytes()
    except OSError as e:
        logger.debug("Could not inline image %s: %s", file_path, e)
        return None

    ext = file_path.suffix.lstrip(".").lower()
    mime = IMAGE_MIME_TYPES.get(ext) or mimetypes.guess_type(file_path.name)[0]
    if mime is None:
        mime = f"image/{ext}" if ext else "application/octet-stream"
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def resolve_links(
    markdown: str,
    base_dir: Path,
    inline_images: bool = True,
    inline_limit: int = MAX_INLINE_BYTES,
) -> str:
    """Rewrite relative link and image targets so any renderer can load them.

    Non-PDF local images within ``inline_limit`` bytes become data URIs.
    Other relative targets become absolute ``file://`` URLs. Targets with a
    scheme, root-relative paths and in-page anchors are left untouched.

    Args:
        markdown: Markdown content.
        base_dir: Directory relative targets are resolved against.
        inline_images: Whether to embed small images as data URIs.
        inline_limit: Size ceiling for inlined images.

    Returns:
        Markdown with rewritten targets.
    """

    def replace(match: re.Match) -> str:
        url = match.group("url")
        if is_absolute_target(url):
            return match.group(0)

        bang = match.group("bang")
        text = match.group("text")
        title = match.group("title") or ""

        if bang and inline_images and not PDF_PATTERN.search(url):
            data_uri = image_data_uri(url, base_dir, inline_limit)
            if data_uri:
                return f"{bang}[{text}]({data_uri}{title})"

        return f"{bang}[{text}]({to_file_url(url, base_dir)}{title})"

    return LINK_PATTERN.sub(replace, markdown)
