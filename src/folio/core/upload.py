# ABOUTME: Upload intake: the uploaded file, its declared metadata, and their validation.
# ABOUTME: Parses form-style fields (camelCase, string values) into typed declarations.

import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from folio.config import ALLOWED_EXTENSIONS, MAX_UPLOAD_BYTES
from folio.db.mapping import COVER, IMAGE_TYPES
from folio.errors import ValidationError

# Form field name -> image_metadata column.
FORM_FIELDS = {
    "imageType": "image_type",
    "altText": "alt_text",
    "caption": "caption",
    "copyright": "copyright",
    "isPrimary": "is_primary",
    "displayOrder": "display_order",
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


@dataclass
class UploadedFile:
    """An uploaded image as received: bytes plus what the client declared about them.

    temp_path is set when the upload was spooled to a temporary file that
    should be removed once ingestion has written its copies.
    """

    filename: str
    data: bytes
    mime_type: str
    size: int
    temp_path: Path | None = None

    @classmethod
    def from_path(
        cls, path: Path, *, mime_type: str | None = None, temporary: bool = False
    ) -> "UploadedFile":
        """Build an upload from a file on disk.

        Raises:
            ValidationError: If the file cannot be read.
        """
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ValidationError(f"Cannot read upload {path}: {exc}") from exc
        return cls(
            filename=path.name,
            data=data,
            mime_type=mime_type or guess_mime_type(path.name),
            size=len(data),
            temp_path=path if temporary else None,
        )

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()


@dataclass
class ImageDeclaration:
    """Descriptive metadata the uploader declared for an image."""

    image_type: str = COVER
    alt_text: str | None = None
    caption: str = ""
    copyright: str = ""
    is_primary: bool = False
    display_order: int = 0


def guess_mime_type(filename: str) -> str:
    return mimetypes.guess_type(filename)[0] or "application/octet-stream"


def validate_upload(upload: UploadedFile) -> None:
    """Reject uploads that must not reach storage.

    Raises:
        ValidationError: On a missing file or name, a non-image extension,
            or a file larger than MAX_UPLOAD_BYTES.
    """
    if not upload.filename:
        raise ValidationError("No file uploaded")
    if upload.extension not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Only image files are allowed, got {upload.filename!r}")
    if not upload.data:
        raise ValidationError(f"Uploaded file {upload.filename!r} is empty")
    if max(upload.size, len(upload.data)) > MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"Uploaded file {upload.filename!r} exceeds {MAX_UPLOAD_BYTES} bytes"
        )


def parse_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValidationError(f"{field} must be true or false, got {value!r}")


def parse_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer, got {value!r}") from exc


def parse_image_type(value: Any) -> str:
    image_type = value or COVER
    if image_type not in IMAGE_TYPES:
        raise ValidationError(
            f"imageType must be one of {', '.join(IMAGE_TYPES)}, got {value!r}"
        )
    return image_type


def parse_declaration(form: Mapping[str, Any] | None) -> ImageDeclaration:
    """Build an ImageDeclaration from upload form fields, applying defaults.

    Unrecognized form fields are ignored.
    """
    form = form or {}
    alt_text = form.get("altText")
    display_order = form.get("displayOrder")
    is_primary = form.get("isPrimary")
    return ImageDeclaration(
        image_type=parse_image_type(form.get("imageType")),
        alt_text=alt_text or None,
        caption=form.get("caption") or "",
        copyright=form.get("copyright") or "",
        is_primary=parse_bool(is_primary, "isPrimary") if is_primary is not None else False,
        display_order=(
            parse_int(display_order, "displayOrder") if display_order not in (None, "") else 0
        ),
    )


def parse_update_fields(form: Mapping[str, Any]) -> dict[str, Any]:
    """Translate update form fields to column names with typed values.

    Only fields present in the form are returned, so an absent field stays
    distinct from one set to "".

    Raises:
        ValidationError: On an unrecognized field or a malformed value.
    """
    unknown = sorted(set(form) - set(FORM_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown image field(s): {', '.join(unknown)}")

    fields: dict[str, Any] = {}
    for name, value in form.items():
        column = FORM_FIELDS[name]
        if column == "is_primary":
            fields[column] = parse_bool(value, name)
        elif column == "display_order":
            fields[column] = parse_int(value, name)
        elif column == "image_type":
            fields[column] = parse_image_type(value)
        else:
            fields[column] = value
    return fields
