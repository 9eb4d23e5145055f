# ABOUTME: Public API for Folio's on-disk image storage.
# ABOUTME: Exports the directory layout, sanitizer, and the media tree wrapper.

from folio.storage.layout import (
    BookDirectories,
    StorageLayout,
    TargetFiles,
    new_base_filename,
    sanitize_token,
)
from folio.storage.media import MediaStorage

__all__ = [
    "BookDirectories",
    "MediaStorage",
    "StorageLayout",
    "TargetFiles",
    "new_base_filename",
    "sanitize_token",
]
