# ABOUTME: Core image workflows: upload intake, ingestion service, import, and verification.
# ABOUTME: Exports the service and the upload types callers build requests from.

from folio.core.service import ImageService, UpdateResult
from folio.core.upload import (
    ImageDeclaration,
    UploadedFile,
    parse_declaration,
    parse_update_fields,
    validate_upload,
)

__all__ = [
    "ImageDeclaration",
    "ImageService",
    "UpdateResult",
    "UploadedFile",
    "parse_declaration",
    "parse_update_fields",
    "validate_upload",
]
