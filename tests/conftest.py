# ABOUTME: Shared pytest fixtures for Folio tests.
# ABOUTME: Provides Pillow-generated images, a temporary library and media tree, and sample EPUBs.

import logging
import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from ebooklib import epub
from rich.logging import RichHandler

from folio.core.service import ImageService
from folio.core.upload import UploadedFile, guess_mime_type
from folio.db.connection import open_library
from folio.storage import MediaStorage
from tests.fixtures.images import make_image_bytes


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[logging.Logger]:
    """Undo the RichHandler and level that CLI runs install on the root logger."""
    root = logging.getLogger()
    before, level = set(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler) and handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def png_bytes() -> bytes:
    """A landscape 800x600 PNG."""
    return make_image_bytes((800, 600), "PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A portrait 300x450 JPEG."""
    return make_image_bytes((300, 450), "JPEG")


@pytest.fixture
def make_upload(png_bytes: bytes) -> Callable[..., UploadedFile]:
    """Factory for in-memory uploads; defaults to the sample PNG."""

    def _make(filename: str = "cover.png", data: bytes | None = None) -> UploadedFile:
        payload = png_bytes if data is None else data
        return UploadedFile(
            filename=filename,
            data=payload,
            mime_type=guess_mime_type(filename),
            size=len(payload),
        )

    return _make


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Location of a fresh library database."""
    return tmp_path / "library.db"


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    """Root of a fresh media tree."""
    return tmp_path / "public"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """An open library connection, closed after the test."""
    connection = open_library(db_path)
    yield connection
    connection.close()


@pytest.fixture
def storage(media_root: Path) -> MediaStorage:
    return MediaStorage(media_root)


@pytest.fixture
def service(conn: sqlite3.Connection, storage: MediaStorage) -> ImageService:
    """An ImageService over the temporary library and media tree."""
    return ImageService(conn, storage)


@pytest.fixture
def book_id(service: ImageService) -> int:
    """A cataloged book with a category and author."""
    return service.catalog.add_book(
        "Dune", author="Frank Herbert", category="Science Fiction", isbn="9780441013593"
    )


@pytest.fixture
def corrupt_jpg(tmp_path: Path) -> Path:
    """A file named like a JPEG whose bytes are not an image."""
    filepath = tmp_path / "broken.jpg"
    filepath.write_bytes(b"this is definitely not a jpeg")
    return filepath


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """A directory of images to import, plus a file that is not an image.

    Layout:
        scans/
            a_front.png
            b_back.jpg
            notes.txt
            extra/
                c_spine.png
    """
    root = tmp_path / "scans"
    (root / "extra").mkdir(parents=True)
    (root / "a_front.png").write_bytes(make_image_bytes((400, 600), "PNG"))
    (root / "b_back.jpg").write_bytes(make_image_bytes((400, 600), "JPEG"))
    (root / "extra" / "c_spine.png").write_bytes(make_image_bytes((60, 600), "PNG"))
    (root / "notes.txt").write_text("not an image")
    return root


def _write_epub(book: epub.EpubBook, filepath: Path) -> Path:
    chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
    chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
    book.add_item(chapter)

    book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chapter]

    epub.write_epub(str(filepath), book)
    return filepath


@pytest.fixture
def sample_epub(tmp_path: Path, jpeg_bytes: bytes) -> Path:
    """A minimal valid EPUB with an embedded JPEG cover."""
    book = epub.EpubBook()
    book.set_identifier("test-isbn-978-0-441-01359-3")
    book.set_title("Dune")
    book.set_language("en")
    book.add_author("Frank Herbert")
    book.set_cover("cover.jpg", jpeg_bytes)
    return _write_epub(book, tmp_path / "dune.epub")


@pytest.fixture
def coverless_epub(tmp_path: Path) -> Path:
    """A minimal valid EPUB with no cover image."""
    book = epub.EpubBook()
    book.set_identifier("minimal-id")
    book.set_title("Untitled Book")
    book.set_language("en")
    return _write_epub(book, tmp_path / "minimal.epub")


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """Create a corrupt file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath
