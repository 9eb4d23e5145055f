# ABOUTME: Integration tests for importing and extracting images into the library.
# ABOUTME: Runs directory import and EPUB cover extraction through real storage, then verifies.

from pathlib import Path

from folio.core.importer import find_images, import_images
from folio.core.service import ImageService
from folio.core.upload import ImageDeclaration
from folio.core.verifier import verify_storage
from folio.sources.epub import extract_cover


class TestImportPipeline:
    """Directory import end to end."""

    def test_import_then_verify_clean(
        self, service: ImageService, book_id: int, image_dir: Path
    ) -> None:
        result = import_images(find_images(image_dir), service, book_id, primary_first=True)

        assert len(result.added) == 3
        verified = verify_storage(service.store, service.storage)
        assert verified.ok == 3
        assert verified.total_issues == 0

        listed = service.list_for_book(book_id)
        assert listed[0].id == result.added[0].id
        assert listed[0].is_primary is True

    def test_reimport_adds_new_rows(
        self, service: ImageService, book_id: int, image_dir: Path
    ) -> None:
        """Importing the same files twice stores them twice under fresh names."""
        first = import_images(find_images(image_dir), service, book_id)
        second = import_images(find_images(image_dir), service, book_id)

        first_paths = {r.paths.original for r in first.added}
        second_paths = {r.paths.original for r in second.added}
        assert first_paths.isdisjoint(second_paths)
        assert len(service.store.list_all()) == 6


class TestEpubCoverPipeline:
    """EPUB cover extraction into storage."""

    def test_extracted_cover_becomes_primary(
        self, service: ImageService, book_id: int, sample_epub: Path
    ) -> None:
        record = service.ingest(
            extract_cover(sample_epub),
            book_id=book_id,
            declaration=ImageDeclaration(is_primary=True),
        )

        assert (record.width, record.height) == (300, 450)
        assert record.mime_type == "image/jpeg"
        assert record.paths.medium.endswith("_medium.jpg")
        assert service.catalog.require(book_id).cover_image_ref == record.paths.medium
