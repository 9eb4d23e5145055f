# ABOUTME: Dataclasses for cataloged books and images, and their SQLite row conversions.
# ABOUTME: Keeps column names in one place so the rest of Folio works with typed records.

from dataclasses import dataclass
from typing import Any

COVER = "cover"
INTERIOR = "interior"
IMAGE_TYPES = (COVER, INTERIOR)


@dataclass
class BookRecord:
    """A cataloged book. cover_image_ref mirrors the primary cover's medium locator."""

    id: int
    title: str
    author: str | None
    category: str | None
    isbn: str | None
    cover_image_ref: str | None
    date_added: str
    date_modified: str


@dataclass(frozen=True)
class ImagePaths:
    """The three storage locators of one stored image."""

    original: str
    thumbnail: str
    medium: str

    def as_tuple(self) -> tuple[str, str, str]:
        return (self.original, self.thumbnail, self.medium)


@dataclass
class NewImage:
    """Everything needed to insert an image_metadata row."""

    book_id: int | None
    image_type: str
    paths: ImagePaths
    original_filename: str
    alt_text: str
    caption: str
    copyright: str
    width: int
    height: int
    size_bytes: int
    mime_type: str
    is_primary: bool = False
    display_order: int = 0


@dataclass
class ImageRecord:
    """A stored image as read back from the image_metadata table."""

    id: int
    book_id: int | None
    image_type: str
    paths: ImagePaths
    original_filename: str | None
    alt_text: str | None
    caption: str
    copyright: str
    width: int
    height: int
    size_bytes: int | None
    mime_type: str | None
    is_primary: bool
    display_order: int
    created_at: str

    @property
    def is_primary_cover(self) -> bool:
        """Whether this row is the primary cover of its book."""
        return self.book_id is not None and self.image_type == COVER and self.is_primary


def new_image_to_row(image: NewImage) -> dict[str, Any]:
    """Convert a NewImage to a dict suitable for INSERT."""
    return {
        "book_id": image.book_id,
        "image_type": image.image_type,
        "original_path": image.paths.original,
        "thumbnail_path": image.paths.thumbnail,
        "medium_path": image.paths.medium,
        "original_filename": image.original_filename,
        "alt_text": image.alt_text,
        "caption": image.caption,
        "copyright": image.copyright,
        "width": image.width,
        "height": image.height,
        "size_bytes": image.size_bytes,
        "mime_type": image.mime_type,
        "is_primary": int(image.is_primary),
        "display_order": image.display_order,
    }


def row_to_image(row: Any) -> ImageRecord:
    """Convert an image_metadata row (dict-like) to an ImageRecord."""
    return ImageRecord(
        id=row["id"],
        book_id=row["book_id"],
        image_type=row["image_type"],
        paths=ImagePaths(
            original=row["original_path"],
            thumbnail=row["thumbnail_path"],
            medium=row["medium_path"],
        ),
        original_filename=row["original_filename"],
        alt_text=row["alt_text"],
        caption=row["caption"],
        copyright=row["copyright"],
        width=row["width"],
        height=row["height"],
        size_bytes=row["size_bytes"],
        mime_type=row["mime_type"],
        is_primary=bool(row["is_primary"]),
        display_order=row["display_order"],
        created_at=row["created_at"],
    )


def row_to_book(row: Any) -> BookRecord:
    """Convert a books row (dict-like) to a BookRecord."""
    return BookRecord(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        category=row["category"],
        isbn=row["isbn"],
        cover_image_ref=row["cover_image_ref"],
        date_added=row["date_added"],
        date_modified=row["date_modified"],
    )
