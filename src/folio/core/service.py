# ABOUTME: Image ingestion, listing, update, and deletion for cataloged books.
# ABOUTME: Orchestrates storage layout, derivative rendering, metadata rows, and cover consistency.

import logging
import sqlite3
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from folio.core.upload import ImageDeclaration, UploadedFile, validate_upload
from folio.db.catalog import LibraryCatalog
from folio.db.covers import BookLocks, CoverManager
from folio.db.images import ImageMetadataStore, validate_image_fields
from folio.db.mapping import COVER, IMAGE_TYPES, ImageRecord, NewImage
from folio.errors import FolioError, StorageError, ValidationError
from folio.imaging import (
    INGEST_SIZES,
    decode_image,
    derivative_extension,
    read_dimensions,
    render_derivative,
)
from folio.storage import MediaStorage, new_base_filename

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """Outcome of a partial image update. image is None when nothing was touched."""

    updated: bool
    image: ImageRecord | None = None


class ImageService:
    """Entry point for everything that stores, changes, or removes book images.

    One service per unit of work: it wraps a single sqlite3 connection and
    the media tree files are written to.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        storage: MediaStorage,
        *,
        locks: BookLocks | None = None,
    ) -> None:
        self.catalog = LibraryCatalog(conn)
        self.store = ImageMetadataStore(conn)
        self.covers = CoverManager(self.store, locks)
        self.storage = storage

    def ingest(
        self,
        upload: UploadedFile,
        book_id: int | None = None,
        declaration: ImageDeclaration | None = None,
    ) -> ImageRecord:
        """Store an uploaded image with its derivatives and record it.

        Writes the original verbatim plus thumbnail and medium derivatives,
        inserts the metadata row, and when the image is a declared primary
        cover of a book, promotes it in the same transaction as the insert.

        Raises:
            ValidationError: If the upload or declaration is rejected.
            NotFoundError: If book_id does not exist.
            ImageProcessingError: If the bytes cannot be decoded or encoded.
            StorageError: If a directory or file write fails (earlier writes stay).
            PersistenceError: If the row cannot be inserted (written files are orphaned).
        """
        validate_upload(upload)
        declaration = declaration or ImageDeclaration()
        if declaration.image_type not in IMAGE_TYPES:
            raise ValidationError(f"Unknown image type: {declaration.image_type!r}")

        category = author = None
        if book_id is not None:
            book = self.catalog.require(book_id)
            category, author = book.category, book.author

        layout = self.storage.layout
        layout.ensure_base_directories()
        dirs = layout.book_directories(book_id, category, author)
        targets = layout.target_files(
            new_base_filename(), upload.extension, dirs,
            derivative_ext=derivative_extension(upload.extension),
        )

        source = decode_image(upload.data, upload.extension)
        width, height = read_dimensions(source)
        thumbnail, medium = (
            render_derivative(source, size, upload.extension) for size in INGEST_SIZES
        )

        self.storage.write_bytes(targets.original, upload.data)
        self.storage.write_bytes(targets.thumbnail, thumbnail)
        self.storage.write_bytes(targets.medium, medium)
        _discard_temporary(upload)

        promote = book_id is not None and declaration.image_type == COVER and declaration.is_primary
        new_image = NewImage(
            book_id=book_id,
            image_type=declaration.image_type,
            paths=self.storage.locators(targets),
            original_filename=upload.filename,
            alt_text=declaration.alt_text or upload.filename,
            caption=declaration.caption,
            copyright=declaration.copyright,
            width=width,
            height=height,
            size_bytes=upload.size,
            mime_type=upload.mime_type,
            # Promotion sets the flag once the other covers are cleared.
            is_primary=declaration.is_primary and not promote,
            display_order=declaration.display_order,
        )

        if promote:
            assert book_id is not None
            with self.covers.book_transaction(book_id):
                record = self.store.insert(new_image)
                self.covers.promote(book_id, record.id, record.paths.medium)
            record.is_primary = True
        else:
            record = self.store.insert(new_image)

        logger.info(
            "Stored image %d (%s, %dx%d) for book %s",
            record.id, upload.filename, width, height, book_id,
        )
        return record

    def list_for_book(self, book_id: int, image_type: str | None = None) -> list[ImageRecord]:
        """A book's images, primary first, then by display_order and insertion.

        Raises:
            NotFoundError: If book_id does not exist.
        """
        self.catalog.require(book_id)
        return self.store.list_for_book(book_id, image_type)

    def image_urls(self, record: ImageRecord, base_url: str) -> dict[str, str]:
        """Absolute URLs of an image's three files."""
        return {
            "original": self.storage.url_for(record.paths.original, base_url),
            "thumbnail": self.storage.url_for(record.paths.thumbnail, base_url),
            "medium": self.storage.url_for(record.paths.medium, base_url),
        }

    def update(self, image_id: int, fields: dict[str, Any]) -> UpdateResult:
        """Apply a partial update to an image's metadata.

        Only keys present in fields are written. An empty dict is a no-op
        that touches neither the database nor storage. Making an image the
        primary cover of its book goes through CoverManager.set_primary;
        taking the primary flag (or cover type) away from the current
        primary cover clears the book's cover reference.

        Raises:
            ValidationError: On unknown fields or bad values.
            NotFoundError: If image_id does not exist.
            PersistenceError: If a write fails. Metadata already committed
                before a failed cover propagation is kept.
        """
        if not fields:
            return UpdateResult(updated=False)

        validate_image_fields(fields)
        book_id = self.store.require(image_id).book_id
        if book_id is None:
            self.store.update(image_id, **fields)
            return UpdateResult(updated=True, image=self.store.require(image_id))

        # Cover state is read and changed under the book's lock so a concurrent
        # set_primary cannot land between the row write and the cover change.
        with self.covers.locked(book_id):
            self._update_book_image(book_id, image_id, fields)
        return UpdateResult(updated=True, image=self.store.require(image_id))

    def _update_book_image(self, book_id: int, image_id: int, fields: dict[str, Any]) -> None:
        before = self.store.require(image_id)
        after_type = fields.get("image_type", before.image_type)
        after_primary = fields.get("is_primary", before.is_primary)
        ends_primary_cover = after_type == COVER and after_primary
        promote = ends_primary_cover and (
            fields.get("is_primary") is True or not before.is_primary_cover
        )
        demote = before.is_primary_cover and not ends_primary_cover

        column_fields = dict(fields)
        if promote:
            column_fields.pop("is_primary", None)
            if before.is_primary and not before.is_primary_cover:
                # An interior primary turning into a cover waits for set_primary.
                column_fields["is_primary"] = False
        if column_fields:
            self.store.update(image_id, **column_fields)

        cover_ref = before.paths.medium
        if promote:
            self._propagate(
                image_id, lambda: self.covers.set_primary(book_id, image_id, cover_ref)
            )
        elif demote:
            self._propagate(
                image_id, lambda: self.covers.clear_cover(book_id, image_id, cover_ref)
            )

    def delete(self, image_id: int) -> ImageRecord:
        """Delete an image's three files and its row.

        Files that are already gone are skipped. When the row was its book's
        primary cover, the next cover is promoted in the same transaction as
        the row delete.

        Returns:
            The deleted row as it was before deletion.

        Raises:
            NotFoundError: If image_id does not exist (including a repeated delete).
            StorageError: If an existing file cannot be removed; the row is kept.
            PersistenceError: If the row delete fails.
        """
        record = self.store.require(image_id)

        for locator in record.paths.as_tuple():
            self.storage.remove(locator)

        if record.book_id is None:
            self.store.delete_row(image_id)
        else:
            with self.covers.book_transaction(record.book_id):
                current = self.store.require(image_id)
                self.store.delete_row(image_id)
                if current.is_primary_cover:
                    self.covers.reassign_within(record.book_id)

        logger.info("Deleted image %d of book %s", image_id, record.book_id)
        return record

    def delete_book(self, book_id: int) -> int:
        """Delete a book together with all of its images and their files.

        Returns:
            The number of images deleted.
        """
        self.catalog.require(book_id)
        images = self.store.list_for_book(book_id)
        for image in images:
            self.delete(image.id)
        self.catalog.delete_book(book_id)
        return len(images)

    def _propagate(self, image_id: int, action: Callable[[], None]) -> None:
        try:
            action()
        except FolioError as exc:
            logger.error(
                "Cover propagation for image %d failed; metadata update kept: %s",
                image_id, exc,
            )
            raise


def _discard_temporary(upload: UploadedFile) -> None:
    """Remove the spooled upload file, if any, after its copies are written."""
    if upload.temp_path is None:
        return
    try:
        upload.temp_path.unlink(missing_ok=True)
    except OSError as exc:
        raise StorageError(
            f"Could not remove temporary upload {upload.temp_path}: {exc}"
        ) from exc
    upload.temp_path = None
