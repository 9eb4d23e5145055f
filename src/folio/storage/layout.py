# ABOUTME: Directory layout and file naming for stored book images.
# ABOUTME: Sanitizes category/author into directory tokens and derives collision-free names.

import logging
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from folio.errors import StorageError

logger = logging.getLogger(__name__)

UNCATEGORIZED = "uncategorized"
UNKNOWN_AUTHOR = "unknown"
UNASSIGNED = "unassigned"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")

ROLE_SUFFIXES = {
    "original": "_original",
    "thumbnail": "_thumb",
    "medium": "_medium",
}


def sanitize_token(value: str | None, fallback: str) -> str:
    """Turn a category or author into a directory-safe token.

    Every character outside [A-Za-z0-9] becomes "_" and the result is
    lower-cased. Missing or empty values map to fallback. Applying this to
    its own output returns the output unchanged.
    """
    return _UNSAFE_CHARS.sub("_", value or fallback).lower()


def new_base_filename() -> str:
    """A unique base name: millisecond timestamp plus a random UUID4."""
    return f"{time.time_ns() // 1_000_000}-{uuid.uuid4()}"


@dataclass(frozen=True)
class BookDirectories:
    """The three per-book placement directories."""

    by_book: Path
    by_category: Path
    by_author: Path


@dataclass(frozen=True)
class TargetFiles:
    """Absolute file paths an ingestion writes, one per role."""

    original: Path
    thumbnail: Path
    medium: Path


class StorageLayout:
    """Knows where every image file lives under the books directory.

    Layout under books_dir:
        thumbnails/                      thumbnail derivatives
        medium/                          medium derivatives
        by-book/book_<id>/               originals
        by-category/<category token>/
        by-author/<author token>/
    """

    def __init__(self, books_dir: Path) -> None:
        self.books_dir = books_dir
        self.thumbnails_dir = books_dir / "thumbnails"
        self.medium_dir = books_dir / "medium"
        self.by_book_dir = books_dir / "by-book"
        self.by_category_dir = books_dir / "by-category"
        self.by_author_dir = books_dir / "by-author"

    def ensure_base_directories(self) -> None:
        """Create the fixed role directories if missing."""
        for directory in (self.books_dir, self.thumbnails_dir, self.medium_dir, self.by_book_dir):
            _make_dir(directory)

    def book_directories(
        self, book_id: int | None, category: str | None, author: str | None
    ) -> BookDirectories:
        """Return (creating if absent) the by-book, by-category and by-author directories.

        Raises:
            StorageError: If a directory cannot be created.
        """
        book_token = f"book_{book_id}" if book_id is not None else UNASSIGNED
        dirs = BookDirectories(
            by_book=self.by_book_dir / book_token,
            by_category=self.by_category_dir / sanitize_token(category, UNCATEGORIZED),
            by_author=self.by_author_dir / sanitize_token(author, UNKNOWN_AUTHOR),
        )
        for directory in (dirs.by_book, dirs.by_category, dirs.by_author):
            _make_dir(directory)
        return dirs

    def target_files(
        self,
        base: str,
        extension: str,
        dirs: BookDirectories,
        *,
        derivative_ext: str | None = None,
    ) -> TargetFiles:
        """Compute where each role's file goes for one upload.

        The original keeps extension; thumbnail and medium use derivative_ext
        when their encoding differs from the original's (defaults to extension).
        """
        ext = extension.lower()
        derived = (derivative_ext or ext).lower()
        return TargetFiles(
            original=dirs.by_book / f"{base}{ROLE_SUFFIXES['original']}{ext}",
            thumbnail=self.thumbnails_dir / f"{base}{ROLE_SUFFIXES['thumbnail']}{derived}",
            medium=self.medium_dir / f"{base}{ROLE_SUFFIXES['medium']}{derived}",
        )

    def image_directories(self) -> list[Path]:
        """Directories that hold stored image files (used for orphan scans)."""
        return [self.thumbnails_dir, self.medium_dir, self.by_book_dir]


def _make_dir(directory: Path) -> None:
    if directory.is_dir():
        return
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Could not create directory {directory}: {exc}") from exc
    logger.debug("Created directory: %s", directory)

