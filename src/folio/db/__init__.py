# ABOUTME: Public API for the Folio library database layer.
# ABOUTME: Exports connection management, book and image stores, cover consistency, and records.

from folio.db.catalog import DuplicateBookError, LibraryCatalog
from folio.db.connection import DEFAULT_DB_PATH, open_library, transaction
from folio.db.covers import BookLocks, CoverManager
from folio.db.images import ImageMetadataStore
from folio.db.mapping import COVER, INTERIOR, BookRecord, ImagePaths, ImageRecord, NewImage

__all__ = [
    "COVER",
    "DEFAULT_DB_PATH",
    "INTERIOR",
    "BookLocks",
    "BookRecord",
    "CoverManager",
    "DuplicateBookError",
    "ImageMetadataStore",
    "ImagePaths",
    "ImageRecord",
    "LibraryCatalog",
    "NewImage",
    "open_library",
    "transaction",
]
