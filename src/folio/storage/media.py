# ABOUTME: Local media tree holding stored image files, addressed by root-relative locators.
# ABOUTME: Converts between locators, filesystem paths, and absolute URLs; writes and removes files.

import logging
from pathlib import Path, PurePosixPath

from folio.db.mapping import ImagePaths
from folio.errors import StorageError
from folio.storage.layout import StorageLayout, TargetFiles

logger = logging.getLogger(__name__)


class MediaStorage:
    """Files under a media root, published at the same relative paths over HTTP.

    A locator is the file's path relative to the root, POSIX-style with a
    leading slash, e.g. "/uploads/books/medium/<name>_medium.jpg".
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.layout = StorageLayout(root / "uploads" / "books")

    def locate(self, path: Path) -> str:
        """Locator for a file inside the media root."""
        try:
            relative = path.relative_to(self.root)
        except ValueError as exc:
            raise StorageError(f"{path} is outside the media root {self.root}") from exc
        return "/" + relative.as_posix()

    def locators(self, targets: TargetFiles) -> ImagePaths:
        return ImagePaths(
            original=self.locate(targets.original),
            thumbnail=self.locate(targets.thumbnail),
            medium=self.locate(targets.medium),
        )

    def resolve(self, locator: str) -> Path:
        """Filesystem path for a locator.

        Raises:
            StorageError: If the locator would escape the media root.
        """
        parts = PurePosixPath(locator.lstrip("/")).parts
        if not parts or ".." in parts:
            raise StorageError(f"Invalid storage locator: {locator!r}")
        return self.root.joinpath(*parts)

    def url_for(self, locator: str, base_url: str) -> str:
        """Absolute URL of a locator under base_url."""
        return f"{base_url.rstrip('/')}{locator}"

    def write_bytes(self, path: Path, data: bytes) -> None:
        """Write data verbatim to path.

        Raises:
            StorageError: If the write fails.
        """
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc

    def remove(self, locator: str) -> bool:
        """Delete the file behind a locator.

        Returns:
            True if a file was removed, False if it was already gone.

        Raises:
            StorageError: If the file exists but cannot be removed.
        """
        path = self.resolve(locator)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("File already missing, nothing to delete: %s", path)
            return False
        except OSError as exc:
            raise StorageError(f"Could not delete {path}: {exc}") from exc
        logger.debug("Deleted %s", path)
        return True

    def exists(self, locator: str) -> bool:
        return self.resolve(locator).is_file()

    def stored_files(self) -> list[Path]:
        """Every file currently in the image directories, sorted."""
        files: list[Path] = []
        for directory in self.layout.image_directories():
            if directory.is_dir():
                files.extend(p for p in directory.rglob("*") if p.is_file())
        return sorted(files)
