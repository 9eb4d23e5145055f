# ABOUTME: Keeps at most one primary cover per book and mirrors it into books.cover_image_ref.
# ABOUTME: Same-book changes are serialized by a per-book lock plus an immediate transaction.

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from folio.db.connection import transaction
from folio.db.images import ImageMetadataStore
from folio.db.mapping import COVER, ImageRecord
from folio.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class BookLocks:
    """Registry of one reentrant lock per book id.

    Holding a book's lock serializes cover changes for that book within the
    process; different books never share a lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.RLock] = {}

    def for_book(self, book_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(book_id)
            if lock is None:
                lock = self._locks[book_id] = threading.RLock()
            return lock


# Shared by every CoverManager in the process, whatever connection it wraps.
_PROCESS_LOCKS = BookLocks()


class CoverManager:
    """Owns the is_primary flag of cover rows and the book's denormalized cover reference."""

    def __init__(self, store: ImageMetadataStore, locks: BookLocks | None = None) -> None:
        self._store = store
        self._conn: sqlite3.Connection = store.connection
        self._locks = locks or _PROCESS_LOCKS

    @contextmanager
    def book_transaction(self, book_id: int) -> Iterator[sqlite3.Connection]:
        """Hold the book's lock and one write transaction for the enclosed work.

        sqlite3 errors raised inside are re-raised as PersistenceError after
        the transaction rolls back.
        """
        with self._locks.for_book(book_id):
            try:
                with transaction(self._conn) as conn:
                    yield conn
            except sqlite3.Error as exc:
                raise PersistenceError(
                    f"Cover update for book {book_id} failed: {exc}"
                ) from exc

    def promote(self, book_id: int, image_id: int, cover_ref: str) -> None:
        """Make image_id the book's only primary cover and mirror cover_ref.

        Must run inside book_transaction(book_id). Other rows are cleared
        before the flag is set so no statement ever sees two primaries.
        """
        self._conn.execute(
            "UPDATE image_metadata SET is_primary = 0 "
            "WHERE book_id = ? AND image_type = ? AND id != ? AND is_primary = 1",
            (book_id, COVER, image_id),
        )
        cursor = self._conn.execute(
            "UPDATE image_metadata SET is_primary = 1 "
            "WHERE id = ? AND book_id = ? AND image_type = ?",
            (image_id, book_id, COVER),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Cover image {image_id} not found for book {book_id}")
        self._write_ref(book_id, cover_ref)

    def set_primary(self, book_id: int, image_id: int, cover_ref: str) -> None:
        """Atomically designate image_id as the primary cover of book_id.

        Clears is_primary on every other cover row of the book, sets it on
        image_id, and writes cover_ref into books.cover_image_ref, all in one
        transaction.

        Raises:
            NotFoundError: If image_id is not a cover row of book_id, or the book is gone.
            PersistenceError: If the transaction fails.
        """
        with self.book_transaction(book_id):
            self.promote(book_id, image_id, cover_ref)
        logger.info("Book %d primary cover is now image %d", book_id, image_id)

    def reassign_primary(self, book_id: int) -> ImageRecord | None:
        """Promote the next cover after the primary was deleted.

        Picks the remaining cover with the lowest display_order (ties: lowest
        id). With no covers left, the book's cover reference is cleared.

        Returns:
            The promoted image (with is_primary set), or None if no covers remain.
        """
        with self.book_transaction(book_id):
            promoted = self.reassign_within(book_id)
        if promoted is None:
            logger.info("Book %d has no covers left; cover reference cleared", book_id)
        else:
            logger.info("Book %d primary cover reassigned to image %d", book_id, promoted.id)
        return promoted

    def reassign_within(self, book_id: int) -> ImageRecord | None:
        """reassign_primary's body, for callers already in book_transaction(book_id)."""
        candidate = self._store.first_remaining_cover(book_id)
        if candidate is None:
            self._write_ref(book_id, None)
            return None
        self.promote(book_id, candidate.id, candidate.paths.medium)
        candidate.is_primary = True
        return candidate

    def clear_cover(self, book_id: int, image_id: int, cover_ref: str) -> bool:
        """Take the primary cover role away from image_id.

        Only image_id's flag is touched, and the book's reference is cleared
        only while it still equals cover_ref, so a primary set on another
        image in the meantime survives.

        Returns:
            True if the book's cover reference was cleared.

        Raises:
            NotFoundError: If the book is gone.
        """
        with self.book_transaction(book_id):
            self._conn.execute(
                "UPDATE image_metadata SET is_primary = 0 "
                "WHERE id = ? AND book_id = ? AND image_type = ? AND is_primary = 1",
                (image_id, book_id, COVER),
            )
            cursor = self._conn.execute(
                "UPDATE books SET cover_image_ref = NULL, "
                "date_modified = strftime('%Y-%m-%dT%H:%M:%S', 'now') "
                "WHERE id = ? AND cover_image_ref = ?",
                (book_id, cover_ref),
            )
            cleared = cursor.rowcount > 0
            if not cleared and not self._book_exists(book_id):
                raise NotFoundError(f"Book with id {book_id} not found")
        if cleared:
            logger.info("Book %d cover reference cleared", book_id)
        else:
            logger.info("Book %d cover reference no longer points at image %d", book_id, image_id)
        return cleared

    def locked(self, book_id: int) -> threading.RLock:
        """The book's lock, for work that spans several cover-related writes.

        The lock is reentrant, so book_transaction() may run while it is held.
        """
        return self._locks.for_book(book_id)

    def _book_exists(self, book_id: int) -> bool:
        row = self._conn.execute("SELECT 1 FROM books WHERE id = ?", (book_id,)).fetchone()
        return row is not None

    def _write_ref(self, book_id: int, cover_ref: str | None) -> None:
        cursor = self._conn.execute(
            "UPDATE books SET cover_image_ref = ?, "
            "date_modified = strftime('%Y-%m-%dT%H:%M:%S', 'now') WHERE id = ?",
            (cover_ref, book_id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Book with id {book_id} not found")
