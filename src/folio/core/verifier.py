# ABOUTME: Storage integrity verification for the Folio image catalog.
# ABOUTME: Finds rows whose files are missing and stored files no row references.

from dataclasses import dataclass, field
from pathlib import Path

from folio.db.images import ImageMetadataStore
from folio.db.mapping import ImageRecord
from folio.storage import MediaStorage


@dataclass
class MissingFile:
    """One locator of a row that has no file behind it."""

    image: ImageRecord
    role: str
    locator: str


@dataclass
class VerifyResult:
    """Aggregated results from a storage verification run."""

    ok: int = 0
    missing: list[MissingFile] = field(default_factory=list)
    orphans: list[Path] = field(default_factory=list)

    @property
    def total_issues(self) -> int:
        """Total number of issues found across all categories."""
        return len(self.missing) + len(self.orphans)


def verify_storage(
    store: ImageMetadataStore, storage: MediaStorage, *, check_orphans: bool = True
) -> VerifyResult:
    """Check that every image row's files exist, and optionally find orphans.

    Orphans are files in the image directories that no row references,
    typically left by an ingestion whose metadata insert failed.

    Args:
        store: The image metadata store to verify.
        storage: The media tree the rows point into.
        check_orphans: Whether to scan the storage tree for unreferenced files.

    Returns:
        A VerifyResult with counts and lists of problems.
    """
    result = VerifyResult()
    referenced: set[Path] = set()

    for image in store.list_all():
        has_issue = False
        for role, locator in zip(("original", "thumbnail", "medium"), image.paths.as_tuple()):
            referenced.add(storage.resolve(locator))
            if not storage.exists(locator):
                result.missing.append(MissingFile(image=image, role=role, locator=locator))
                has_issue = True
        if not has_issue:
            result.ok += 1

    if check_orphans:
        result.orphans = [p for p in storage.stored_files() if p not in referenced]

    return result
