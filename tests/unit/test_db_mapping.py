# ABOUTME: Unit tests for record dataclasses and their SQLite row conversions.
# ABOUTME: Tests the is_primary flag mapping and the primary-cover predicate.

from folio.db.mapping import (
    COVER,
    INTERIOR,
    ImagePaths,
    new_image_to_row,
    row_to_book,
    row_to_image,
)
from tests.fixtures.records import new_image


def _image_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": 5,
        "book_id": 1,
        "image_type": COVER,
        "original_path": "/o.png",
        "thumbnail_path": "/t.png",
        "medium_path": "/m.png",
        "original_filename": "front.png",
        "alt_text": "front.png",
        "caption": "",
        "copyright": "",
        "width": 10,
        "height": 20,
        "size_bytes": 99,
        "mime_type": "image/png",
        "is_primary": 1,
        "display_order": 0,
        "created_at": "2025-01-01T00:00:00.000",
    }
    row.update(overrides)
    return row


class TestNewImageToRow:
    """Tests for new_image_to_row()."""

    def test_flattens_paths_and_flag(self) -> None:
        image = new_image(3, is_primary=True, display_order=4)
        row = new_image_to_row(image)

        assert row["book_id"] == 3
        assert row["original_path"] == image.paths.original
        assert row["thumbnail_path"] == image.paths.thumbnail
        assert row["medium_path"] == image.paths.medium
        assert row["is_primary"] == 1
        assert row["display_order"] == 4
        assert "id" not in row
        assert "created_at" not in row


class TestRowToImage:
    """Tests for row_to_image()."""

    def test_converts_row(self) -> None:
        record = row_to_image(_image_row())
        assert record.id == 5
        assert record.paths == ImagePaths("/o.png", "/t.png", "/m.png")
        assert record.is_primary is True

    def test_primary_cover_predicate(self) -> None:
        """Only a flagged cover that belongs to a book counts as its primary cover."""
        assert row_to_image(_image_row()).is_primary_cover is True
        assert row_to_image(_image_row(is_primary=0)).is_primary_cover is False
        assert row_to_image(_image_row(image_type=INTERIOR)).is_primary_cover is False
        assert row_to_image(_image_row(book_id=None)).is_primary_cover is False


class TestRowToBook:
    """Tests for row_to_book()."""

    def test_converts_row(self) -> None:
        record = row_to_book(
            {
                "id": 1,
                "title": "Dune",
                "author": "Frank Herbert",
                "category": None,
                "isbn": None,
                "cover_image_ref": "/uploads/books/medium/x_medium.png",
                "date_added": "2025-01-01T00:00:00",
                "date_modified": "2025-01-01T00:00:00",
            }
        )
        assert record.title == "Dune"
        assert record.cover_image_ref == "/uploads/books/medium/x_medium.png"
