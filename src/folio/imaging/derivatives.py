# ABOUTME: Decodes uploaded image bytes and renders resized derivatives with Pillow.
# ABOUTME: SVG is rasterized with CairoSVG first; derivatives are padded with (transparent) white.

import io
import logging

import cairosvg
from PIL import Image, ImageOps, UnidentifiedImageError

from folio.errors import ImageProcessingError
from folio.imaging.sizes import DerivativeSize

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)
TRANSPARENT_WHITE = (255, 255, 255, 0)

SVG_EXTENSION = ".svg"

# Output encoder per stored extension, and whether it keeps an alpha channel.
# GIF keeps alpha as a palette transparency index.
_ENCODERS: dict[str, tuple[str, bool]] = {
    ".jpg": ("JPEG", False),
    ".jpeg": ("JPEG", False),
    ".png": ("PNG", True),
    ".webp": ("WEBP", True),
    ".gif": ("GIF", True),
    SVG_EXTENSION: ("PNG", True),
}


def derivative_extension(extension: str) -> str:
    """Extension of the thumbnail and medium files for an original's extension.

    Vector originals have raster derivatives, so ".svg" maps to ".png".
    """
    ext = extension.lower()
    return ".png" if ext == SVG_EXTENSION else ext


def rasterize_svg(data: bytes) -> bytes:
    """Render SVG markup to PNG bytes at its intrinsic size.

    Raises:
        ImageProcessingError: If the markup cannot be parsed or rendered.
    """
    try:
        png = cairosvg.svg2png(bytestring=data)
    except (SyntaxError, ValueError, OSError) as exc:
        raise ImageProcessingError(f"Cannot rasterize SVG: {exc}") from exc
    if not png:
        raise ImageProcessingError("Cannot rasterize SVG: empty drawing")
    return png


def decode_image(data: bytes, extension: str = "") -> Image.Image:
    """Decode raw bytes into a fully loaded Pillow image.

    SVG originals (by extension) are rasterized before decoding.

    Raises:
        ImageProcessingError: If the bytes are not a readable image.
    """
    if extension.lower() == SVG_EXTENSION:
        data = rasterize_svg(data)
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise ImageProcessingError(f"Cannot decode image: {exc}") from exc
    return image


def read_dimensions(image: Image.Image) -> tuple[int, int]:
    """Pixel (width, height) of the decoded original."""
    return image.size


def _flatten_on_white(image: Image.Image) -> Image.Image:
    """Drop any alpha channel by compositing onto opaque white."""
    has_alpha = image.mode in ("RGBA", "LA") or (
        image.mode == "P" and "transparency" in image.info
    )
    if not has_alpha:
        return image.convert("RGB")
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, WHITE)
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def fit_within(image: Image.Image, size: DerivativeSize, *, keep_alpha: bool) -> Image.Image:
    """Scale image to fit size's box, centered and padded to exactly the box.

    Nothing is cropped. The padding is transparent white when keep_alpha is
    set, opaque white otherwise. RGBA frames saved as GIF are quantized by
    Pillow with the transparent padding mapped to the palette transparency index.
    """
    if keep_alpha:
        source = image.convert("RGBA")
        color: tuple[int, ...] = TRANSPARENT_WHITE
    else:
        source = _flatten_on_white(image)
        color = WHITE
    return ImageOps.pad(source, size.box, method=Image.Resampling.LANCZOS, color=color)


def render_derivative(image: Image.Image, size: DerivativeSize, extension: str) -> bytes:
    """Render one derivative and return its encoded bytes.

    The encoder follows the stored file's extension; JPEG and WebP are
    written at size.quality.

    Raises:
        ImageProcessingError: If the extension has no raster encoder or encoding fails.
    """
    encoder = _ENCODERS.get(extension.lower())
    if encoder is None:
        raise ImageProcessingError(f"No encoder for {extension!r} derivatives")
    fmt, keep_alpha = encoder

    fitted = fit_within(image, size, keep_alpha=keep_alpha)
    save_kwargs: dict[str, object] = {}
    if fmt in ("JPEG", "WEBP"):
        save_kwargs["quality"] = size.quality
    if fmt in ("JPEG", "PNG"):
        save_kwargs["optimize"] = True

    buffer = io.BytesIO()
    try:
        fitted.save(buffer, format=fmt, **save_kwargs)
    except (OSError, ValueError) as exc:
        raise ImageProcessingError(f"Cannot encode {size.name} derivative: {exc}") from exc
    logger.debug("Rendered %s derivative (%dx%d, %s)", size.name, size.width, size.height, fmt)
    return buffer.getvalue()
