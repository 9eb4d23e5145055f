# ABOUTME: Unit tests for LibraryCatalog CRUD operations.
# ABOUTME: Validates add, get, update, delete, list, and duplicate detection.

import sqlite3

import pytest

from folio.db.catalog import DuplicateBookError, LibraryCatalog
from folio.errors import NotFoundError, ValidationError


@pytest.fixture()
def catalog(conn: sqlite3.Connection) -> LibraryCatalog:
    """Provide a LibraryCatalog backed by a temporary database."""
    return LibraryCatalog(conn)


class TestAddBook:
    """Tests for LibraryCatalog.add_book."""

    def test_add_returns_id(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.add_book("Dune", author="Frank Herbert")
        assert isinstance(book_id, int)
        assert book_id > 0

    def test_add_persists_fields(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.add_book(
            "  Dune ", author="Frank Herbert", category="Science Fiction", isbn="9780441013593"
        )
        record = catalog.get_by_id(book_id)

        assert record is not None
        assert record.title == "Dune"
        assert record.author == "Frank Herbert"
        assert record.category == "Science Fiction"
        assert record.isbn == "9780441013593"
        assert record.cover_image_ref is None
        assert record.date_added

    def test_empty_title_rejected(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(ValidationError):
            catalog.add_book("   ")

    def test_duplicate_isbn(self, catalog: LibraryCatalog) -> None:
        catalog.add_book("Dune", isbn="9780441013593")
        with pytest.raises(DuplicateBookError):
            catalog.add_book("Dune (again)", isbn="9780441013593")

    def test_books_without_isbn_do_not_collide(self, catalog: LibraryCatalog) -> None:
        catalog.add_book("A")
        catalog.add_book("B")
        assert len(catalog.list_all()) == 2


class TestGetAndList:
    """Tests for lookups and listings."""

    def test_get_missing_returns_none(self, catalog: LibraryCatalog) -> None:
        assert catalog.get_by_id(999) is None

    def test_require_missing_raises(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError):
            catalog.require(999)

    def test_list_all_sorted_by_title(self, catalog: LibraryCatalog) -> None:
        catalog.add_book("Neuromancer")
        catalog.add_book("Dune")
        assert [b.title for b in catalog.list_all()] == ["Dune", "Neuromancer"]

    def test_list_by_category(self, catalog: LibraryCatalog) -> None:
        catalog.add_book("Dune", category="Science Fiction")
        catalog.add_book("Emma", category="Classics")
        titles = [b.title for b in catalog.list_by_category("Science Fiction")]
        assert titles == ["Dune"]


class TestUpdateBook:
    """Tests for LibraryCatalog.update_book."""

    def test_update_fields(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.add_book("Dune")
        catalog.update_book(book_id, author="Frank Herbert", category="Science Fiction")
        record = catalog.require(book_id)
        assert record.author == "Frank Herbert"
        assert record.category == "Science Fiction"

    def test_empty_update_is_noop(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.add_book("Dune")
        before = catalog.require(book_id)
        catalog.update_book(book_id)
        assert catalog.require(book_id) == before

    def test_cover_ref_not_writable(self, catalog: LibraryCatalog) -> None:
        """The cover reference is owned by the cover manager."""
        book_id = catalog.add_book("Dune")
        with pytest.raises(ValidationError, match="cover_image_ref"):
            catalog.update_book(book_id, cover_image_ref="/x.png")

    def test_update_missing_book(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError):
            catalog.update_book(999, title="Nothing")

    def test_update_to_duplicate_isbn(self, catalog: LibraryCatalog) -> None:
        catalog.add_book("Dune", isbn="1")
        other = catalog.add_book("Emma", isbn="2")
        with pytest.raises(DuplicateBookError):
            catalog.update_book(other, isbn="1")


class TestDeleteBook:
    """Tests for LibraryCatalog.delete_book."""

    def test_delete(self, catalog: LibraryCatalog) -> None:
        book_id = catalog.add_book("Dune")
        catalog.delete_book(book_id)
        assert catalog.get_by_id(book_id) is None

    def test_delete_missing(self, catalog: LibraryCatalog) -> None:
        with pytest.raises(NotFoundError):
            catalog.delete_book(999)
