# ABOUTME: CRUD over the image_metadata table.
# ABOUTME: Rows are listed primary-first, then by display_order, then insertion order.

import logging
import sqlite3
from typing import Any

from folio.db.connection import transaction
from folio.db.mapping import (
    COVER,
    IMAGE_TYPES,
    ImageRecord,
    NewImage,
    new_image_to_row,
    row_to_image,
)
from folio.errors import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

# Paths, dimensions, ownership and created_at are fixed at ingestion.
UPDATABLE_FIELDS = frozenset(
    {"image_type", "alt_text", "caption", "copyright", "is_primary", "display_order"}
)

_LIST_ORDER = "ORDER BY is_primary DESC, display_order ASC, id ASC"


def validate_image_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check names and value types of a partial image update.

    Returns the fields with values coerced to their column representation.

    Raises:
        ValidationError: On an unknown field or a value of the wrong type.
    """
    unknown = sorted(set(fields) - UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update image field(s): {', '.join(unknown)}")

    cleaned: dict[str, Any] = {}
    for name, value in fields.items():
        if name == "image_type":
            if value not in IMAGE_TYPES:
                raise ValidationError(
                    f"image_type must be one of {', '.join(IMAGE_TYPES)}, got {value!r}"
                )
        elif name == "is_primary":
            if not isinstance(value, bool):
                raise ValidationError(f"is_primary must be a boolean, got {value!r}")
            value = int(value)
        elif name == "display_order":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"display_order must be an integer, got {value!r}")
        elif value is not None and not isinstance(value, str):
            raise ValidationError(f"{name} must be text, got {value!r}")
        cleaned[name] = value
    return cleaned


class ImageMetadataStore:
    """Typed access to image_metadata rows over a sqlite3 connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def insert(self, image: NewImage) -> ImageRecord:
        """Insert a row and return it as stored, including id and created_at.

        Joins the caller's transaction when one is open.

        Raises:
            PersistenceError: If the insert fails.
        """
        row = new_image_to_row(image)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        try:
            with transaction(self._conn):
                cursor = self._conn.execute(
                    f"INSERT INTO image_metadata ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                image_id = cursor.lastrowid
                stored = self._conn.execute(
                    "SELECT * FROM image_metadata WHERE id = ?", (image_id,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not insert image metadata: {exc}") from exc

        logger.debug("Inserted image %d for book %s", image_id, image.book_id)
        return row_to_image(stored)

    def get_by_id(self, image_id: int) -> ImageRecord | None:
        """Retrieve an image by its row ID."""
        cursor = self._conn.execute("SELECT * FROM image_metadata WHERE id = ?", (image_id,))
        row = cursor.fetchone()
        return row_to_image(row) if row else None

    def require(self, image_id: int) -> ImageRecord:
        """Retrieve an image by ID, raising NotFoundError if it doesn't exist."""
        record = self.get_by_id(image_id)
        if record is None:
            raise NotFoundError(f"Image with id {image_id} not found")
        return record

    def list_for_book(self, book_id: int, image_type: str | None = None) -> list[ImageRecord]:
        """Return a book's images, primary first, then by display_order.

        Args:
            book_id: The owning book.
            image_type: Optional filter, "cover" or "interior".
        """
        if image_type is not None and image_type not in IMAGE_TYPES:
            raise ValidationError(f"Unknown image type: {image_type!r}")

        query = "SELECT * FROM image_metadata WHERE book_id = ?"
        params: list[Any] = [book_id]
        if image_type is not None:
            query += " AND image_type = ?"
            params.append(image_type)
        query += f" {_LIST_ORDER}"

        cursor = self._conn.execute(query, params)
        return [row_to_image(row) for row in cursor.fetchall()]

    def list_all(self) -> list[ImageRecord]:
        """Return every stored image, ordered by id."""
        cursor = self._conn.execute("SELECT * FROM image_metadata ORDER BY id")
        return [row_to_image(row) for row in cursor.fetchall()]

    def first_remaining_cover(self, book_id: int) -> ImageRecord | None:
        """The cover with the lowest display_order (ties: lowest id), if any."""
        cursor = self._conn.execute(
            "SELECT * FROM image_metadata WHERE book_id = ? AND image_type = ? "
            "ORDER BY display_order ASC, id ASC LIMIT 1",
            (book_id, COVER),
        )
        row = cursor.fetchone()
        return row_to_image(row) if row else None

    def update(self, image_id: int, **fields: Any) -> bool:
        """Apply only the provided fields to an image row.

        A field left out is untouched; passing "" sets it to the empty string.
        This writes the is_primary column as given; keeping a single primary
        cover per book is CoverManager's job.

        Returns:
            False when no fields were given (nothing was touched), else True.

        Raises:
            ValidationError: On unknown fields or bad values.
            NotFoundError: If the image_id does not exist.
            PersistenceError: If the update fails.
        """
        if not fields:
            return False

        cleaned = validate_image_fields(fields)
        set_clause = ", ".join(f"{k} = ?" for k in cleaned)
        values = [*cleaned.values(), image_id]

        try:
            with transaction(self._conn):
                cursor = self._conn.execute(
                    f"UPDATE image_metadata SET {set_clause} WHERE id = ?",
                    values,
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not update image {image_id}: {exc}") from exc

        if cursor.rowcount == 0:
            raise NotFoundError(f"Image with id {image_id} not found")
        return True

    def delete_row(self, image_id: int) -> None:
        """Remove an image row. Files are the caller's concern.

        Raises:
            NotFoundError: If the image_id does not exist.
            PersistenceError: If the delete fails.
        """
        try:
            with transaction(self._conn):
                cursor = self._conn.execute(
                    "DELETE FROM image_metadata WHERE id = ?", (image_id,)
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not delete image {image_id}: {exc}") from exc

        if cursor.rowcount == 0:
            raise NotFoundError(f"Image with id {image_id} not found")
