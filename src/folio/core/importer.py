# ABOUTME: Batch import of image files from a directory into a book's image set.
# ABOUTME: Ingests each file through ImageService and records per-file failures.

import logging
from dataclasses import dataclass, field
from pathlib import Path

from folio.config import ALLOWED_EXTENSIONS
from folio.core.service import ImageService
from folio.core.upload import ImageDeclaration, UploadedFile
from folio.db.mapping import COVER, ImageRecord
from folio.errors import FolioError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Summary of an import operation."""

    added: list[ImageRecord] = field(default_factory=list)
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)


def find_images(directory: Path) -> list[Path]:
    """Recursively find image files with an accepted extension, sorted by path."""
    return sorted(
        p for p in directory.rglob("*")
        if p.is_file() and p.suffix.lower() in ALLOWED_EXTENSIONS
    )


def import_images(
    paths: list[Path],
    service: ImageService,
    book_id: int,
    *,
    image_type: str = COVER,
    primary_first: bool = False,
) -> ImportResult:
    """Ingest image files for one book.

    Files are ingested in the given order with display_order 0, 1, 2, ...
    When primary_first is set, the first successfully stored cover is
    declared primary. A file that fails validation, decoding, or storage is
    recorded as an error and the batch continues.

    Raises:
        NotFoundError: If book_id does not exist (checked before any file is read).
    """
    if service.catalog.get_by_id(book_id) is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    result = ImportResult()

    for order, path in enumerate(paths):
        wants_primary = primary_first and image_type == COVER and not result.added
        declaration = ImageDeclaration(
            image_type=image_type,
            is_primary=wants_primary,
            display_order=order,
        )
        try:
            upload = UploadedFile.from_path(path)
            record = service.ingest(upload, book_id=book_id, declaration=declaration)
        except FolioError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            result.errors += 1
            result.error_details.append((path, str(exc)))
            continue
        result.added.append(record)

    return result
