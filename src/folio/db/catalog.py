# ABOUTME: CRUD operations for books in the Folio library catalog.
# ABOUTME: Books are the owners images attach to; their cover reference is not writable here.

import sqlite3

from folio.db.connection import transaction
from folio.db.mapping import BookRecord, row_to_book
from folio.errors import NotFoundError, PersistenceError, ValidationError

# cover_image_ref is maintained by CoverManager only.
_UPDATABLE_FIELDS = frozenset({"title", "author", "category", "isbn"})


class DuplicateBookError(ValidationError):
    """Raised when attempting to add a book with an ISBN that already exists."""


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for the books table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add_book(
        self,
        title: str,
        *,
        author: str | None = None,
        category: str | None = None,
        isbn: str | None = None,
    ) -> int:
        """Add a book to the catalog.

        Returns:
            The row ID of the inserted book.

        Raises:
            ValidationError: If the title is empty.
            DuplicateBookError: If a book with this ISBN already exists.
        """
        if not title or not title.strip():
            raise ValidationError("Book title is required")

        try:
            with transaction(self._conn):
                cursor = self._conn.execute(
                    "INSERT INTO books (title, author, category, isbn) VALUES (?, ?, ?, ?)",
                    (title.strip(), author, category, isbn),
                )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed: books.isbn" in str(exc):
                raise DuplicateBookError(f"Book with ISBN {isbn} already exists") from exc
            raise PersistenceError(f"Could not add book: {exc}") from exc

        return cursor.lastrowid  # type: ignore[return-value]

    def get_by_id(self, book_id: int) -> BookRecord | None:
        """Retrieve a book by its row ID."""
        cursor = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,))
        row = cursor.fetchone()
        return row_to_book(row) if row else None

    def require(self, book_id: int) -> BookRecord:
        """Retrieve a book by ID, raising NotFoundError if it doesn't exist."""
        record = self.get_by_id(book_id)
        if record is None:
            raise NotFoundError(f"Book with id {book_id} not found")
        return record

    def list_all(self) -> list[BookRecord]:
        """Return all books in the catalog, ordered by title."""
        cursor = self._conn.execute("SELECT * FROM books ORDER BY title, id")
        return [row_to_book(row) for row in cursor.fetchall()]

    def list_by_category(self, category: str) -> list[BookRecord]:
        """Return books in a given category, ordered by title."""
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE category = ? ORDER BY title, id",
            (category,),
        )
        return [row_to_book(row) for row in cursor.fetchall()]

    def update_book(self, book_id: int, **fields: str | None) -> None:
        """Update one or more descriptive fields on a cataloged book.

        Raises:
            ValidationError: If a field is unknown or not writable.
            NotFoundError: If the book_id does not exist.
        """
        if not fields:
            return

        unknown = sorted(set(fields) - _UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update book field(s): {', '.join(unknown)}")

        set_clause = ", ".join(f"{k} = ?" for k in fields)
        set_clause += ", date_modified = strftime('%Y-%m-%dT%H:%M:%S', 'now')"
        values = [*fields.values(), book_id]

        try:
            with transaction(self._conn):
                cursor = self._conn.execute(
                    f"UPDATE books SET {set_clause} WHERE id = ?",
                    values,
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateBookError(f"Could not update book {book_id}: {exc}") from exc

        if cursor.rowcount == 0:
            raise NotFoundError(f"Book with id {book_id} not found")

    def delete_book(self, book_id: int) -> None:
        """Delete a book row. Image rows cascade; their files are not touched.

        Raises:
            NotFoundError: If the book_id does not exist.
        """
        with transaction(self._conn):
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))

        if cursor.rowcount == 0:
            raise NotFoundError(f"Book with id {book_id} not found")
