# ABOUTME: Exception hierarchy shared by every Folio layer.
# ABOUTME: One class per failure kind so callers can tell rejection from partial failure.


class FolioError(Exception):
    """Base class for all Folio errors."""


class ValidationError(FolioError):
    """Raised when an input is rejected before any side effect.

    Covers missing or malformed fields, disallowed file extensions,
    oversize uploads, and unknown update fields.
    """


class ImageProcessingError(FolioError):
    """Raised when the uploaded bytes cannot be decoded as an image."""


class StorageError(FolioError):
    """Raised when a directory or file operation on the media tree fails.

    Files written before the failure are not rolled back.
    """


class PersistenceError(FolioError):
    """Raised when a metadata insert, update, or delete fails in the database."""


class NotFoundError(FolioError):
    """Raised when an operation references an unknown image or book id."""
