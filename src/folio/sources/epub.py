# ABOUTME: Extracts the embedded cover image from an EPUB file using ebooklib.
# ABOUTME: Defensive wrapper that handles malformed files and books without covers.

import logging
import mimetypes
from pathlib import Path, PurePosixPath

import ebooklib
from ebooklib import epub

from folio.config import ALLOWED_EXTENSIONS
from folio.core.upload import UploadedFile, guess_mime_type
from folio.errors import FolioError

logger = logging.getLogger(__name__)

_IMAGE_ITEM_TYPES = (ebooklib.ITEM_IMAGE, ebooklib.ITEM_COVER)


class EpubReadError(FolioError):
    """Raised when an EPUB file cannot be read or has no cover image."""


def _find_cover_item(book: epub.EpubBook) -> epub.EpubItem | None:
    """Locate the cover image item of an EpubBook, if present."""
    # The OPF <meta name="cover" content="..."> points at the item id
    meta_entries = book.get_metadata("OPF", "cover")
    if meta_entries:
        cover_id = meta_entries[0][1].get("content")
        if cover_id:
            item = book.get_item_with_id(cover_id)
            if item is not None and item.get_type() in _IMAGE_ITEM_TYPES:
                return item

    # Fallback: an image item with "cover" in its id or filename
    for item in book.get_items():
        if item.get_type() not in _IMAGE_ITEM_TYPES:
            continue
        item_id = item.get_id() or ""
        item_name = item.get_name() or ""
        if "cover" in item_id.lower() or "cover" in item_name.lower():
            return item

    return None


def _cover_filename(epub_path: Path, item: epub.EpubItem) -> str:
    """Name the extracted cover after the EPUB, keeping a usable image extension."""
    extension = PurePosixPath(item.get_name() or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        guessed = mimetypes.guess_extension(item.media_type or "") or ".jpg"
        extension = ".jpg" if guessed == ".jpe" else guessed
    return f"{epub_path.stem}-cover{extension}"


def extract_cover(path: Path) -> UploadedFile:
    """Pull the cover image out of an EPUB as an upload ready for ingestion.

    Args:
        path: Path to the EPUB file.

    Raises:
        EpubReadError: If the file cannot be parsed or carries no cover image.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path))
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    item = _find_cover_item(book)
    if item is None:
        raise EpubReadError(f"No cover image in {path.name}")

    data = item.get_content()
    if not data:
        raise EpubReadError(f"Cover image in {path.name} is empty")

    filename = _cover_filename(path, item)
    logger.debug("Extracted cover %s (%d bytes) from %s", item.get_name(), len(data), path)
    return UploadedFile(
        filename=filename,
        data=data,
        mime_type=item.media_type or guess_mime_type(filename),
        size=len(data),
    )
