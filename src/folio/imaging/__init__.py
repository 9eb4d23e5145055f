# ABOUTME: Image decoding and derivative rendering for Folio.
# ABOUTME: Exports the fixed sizes and the Pillow-backed render functions.

from folio.imaging.derivatives import (
    decode_image,
    derivative_extension,
    read_dimensions,
    render_derivative,
)
from folio.imaging.sizes import INGEST_SIZES, LARGE, MEDIUM, THUMBNAIL, DerivativeSize

__all__ = [
    "INGEST_SIZES",
    "LARGE",
    "MEDIUM",
    "THUMBNAIL",
    "DerivativeSize",
    "decode_image",
    "derivative_extension",
    "read_dimensions",
    "render_derivative",
]
