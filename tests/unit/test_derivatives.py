# ABOUTME: Unit tests for image decoding and derivative rendering.
# ABOUTME: Checks box sizes, padding, alpha handling, SVG rasterizing, and decode failures.

import pytest

from folio.errors import ImageProcessingError
from folio.imaging import (
    INGEST_SIZES,
    LARGE,
    MEDIUM,
    THUMBNAIL,
    DerivativeSize,
    decode_image,
    derivative_extension,
    read_dimensions,
    render_derivative,
)
from tests.fixtures.images import SAMPLE_SVG, make_image_bytes, open_bytes


class TestSizes:
    """Tests for the fixed derivative sizes."""

    def test_size_table(self) -> None:
        assert (THUMBNAIL.width, THUMBNAIL.height, THUMBNAIL.quality) == (200, 300, 80)
        assert (MEDIUM.width, MEDIUM.height, MEDIUM.quality) == (500, 750, 85)
        assert (LARGE.width, LARGE.height, LARGE.quality) == (1000, 1500, 90)

    def test_ingestion_produces_thumbnail_and_medium_only(self) -> None:
        """The large size is defined but not generated on ingest."""
        assert INGEST_SIZES == (THUMBNAIL, MEDIUM)


class TestDecode:
    """Tests for decode_image() and read_dimensions()."""

    def test_reads_original_dimensions(self, png_bytes: bytes) -> None:
        assert read_dimensions(decode_image(png_bytes)) == (800, 600)

    def test_corrupt_bytes_raise(self) -> None:
        """Bytes that are not an image raise ImageProcessingError."""
        with pytest.raises(ImageProcessingError):
            decode_image(b"not an image at all")

    def test_truncated_image_raises(self, jpeg_bytes: bytes) -> None:
        """A cut-off JPEG fails to load."""
        with pytest.raises(ImageProcessingError):
            decode_image(jpeg_bytes[: len(jpeg_bytes) // 3])

    def test_svg_is_rasterized_at_intrinsic_size(self) -> None:
        """SVG originals decode to a raster image of the drawing's width and height."""
        image = decode_image(SAMPLE_SVG, ".SVG")
        assert read_dimensions(image) == (120, 80)
        r, g, b, *_ = image.convert("RGBA").getpixel((60, 40))
        assert r > 150 and g < 80 and b < 80

    def test_malformed_svg_raises(self) -> None:
        with pytest.raises(ImageProcessingError):
            decode_image(b"<svg this is not xml", ".svg")

    def test_svg_bytes_without_svg_extension_are_not_rasterized(self) -> None:
        with pytest.raises(ImageProcessingError):
            decode_image(SAMPLE_SVG, ".png")


class TestDerivativeExtension:
    """Tests for derivative_extension()."""

    def test_raster_extensions_are_kept(self) -> None:
        assert derivative_extension(".JPG") == ".jpg"
        assert derivative_extension(".webp") == ".webp"

    def test_svg_derivatives_are_png(self) -> None:
        assert derivative_extension(".svg") == ".png"


class TestRenderDerivative:
    """Tests for render_derivative()."""

    @pytest.mark.parametrize("size", [THUMBNAIL, MEDIUM])
    @pytest.mark.parametrize("extension", [".jpg", ".jpeg", ".png", ".gif", ".webp"])
    def test_output_matches_box_exactly(
        self, png_bytes: bytes, size: DerivativeSize, extension: str
    ) -> None:
        """Every derivative is exactly the target box, whatever the aspect ratio."""
        rendered = render_derivative(decode_image(png_bytes), size, extension)
        assert open_bytes(rendered).size == size.box

    def test_encoder_follows_extension(self, png_bytes: bytes) -> None:
        source = decode_image(png_bytes)
        assert open_bytes(render_derivative(source, THUMBNAIL, ".jpg")).format == "JPEG"
        assert open_bytes(render_derivative(source, THUMBNAIL, ".PNG")).format == "PNG"
        assert open_bytes(render_derivative(source, THUMBNAIL, ".webp")).format == "WEBP"
        assert open_bytes(render_derivative(source, THUMBNAIL, ".gif")).format == "GIF"

    def test_png_padding_is_transparent_white(self, png_bytes: bytes) -> None:
        """A landscape source is letterboxed; PNG padding keeps alpha 0."""
        rendered = open_bytes(render_derivative(decode_image(png_bytes), THUMBNAIL, ".png"))
        assert rendered.mode == "RGBA"
        assert rendered.getpixel((0, 0)) == (255, 255, 255, 0)
        # The content band is opaque and carries the source color.
        r, g, b, a = rendered.getpixel((100, 150))
        assert a == 255
        assert r > 150 and g < 80 and b < 80

    def test_jpeg_padding_is_opaque_white(self, png_bytes: bytes) -> None:
        """JPEG derivatives are flattened and padded with white."""
        rendered = open_bytes(render_derivative(decode_image(png_bytes), MEDIUM, ".jpg"))
        assert rendered.mode == "RGB"
        r, g, b = rendered.getpixel((0, 0))
        assert min(r, g, b) >= 240

    def test_transparent_source_flattens_onto_white_for_jpeg(self) -> None:
        """Transparent pixels become white, not black, in a JPEG derivative."""
        data = make_image_bytes((500, 750), "PNG", mode="RGBA", color=(0, 0, 0, 0))
        rendered = open_bytes(render_derivative(decode_image(data), MEDIUM, ".jpg"))
        r, g, b = rendered.getpixel((250, 375))
        assert min(r, g, b) >= 240

    def test_small_source_is_upscaled_to_fit(self) -> None:
        """A source smaller than the box is scaled up; nothing is cropped."""
        data = make_image_bytes((20, 30), "PNG")
        rendered = open_bytes(render_derivative(decode_image(data), THUMBNAIL, ".png"))
        assert rendered.size == (200, 300)
        # Same aspect ratio as the box, so there is no padding at the corner.
        assert rendered.getpixel((0, 0))[3] == 255

    def test_gif_padding_is_transparent(self, png_bytes: bytes) -> None:
        """GIF derivatives keep the letterbox transparent through the palette."""
        rendered = open_bytes(render_derivative(decode_image(png_bytes), THUMBNAIL, ".gif"))
        assert "transparency" in rendered.info
        rgba = rendered.convert("RGBA")
        assert rgba.getpixel((0, 0))[3] == 0
        assert rgba.getpixel((100, 150))[3] == 255

    def test_svg_source_renders_png(self) -> None:
        rendered = open_bytes(render_derivative(decode_image(SAMPLE_SVG, ".svg"), MEDIUM, ".svg"))
        assert rendered.format == "PNG"
        assert rendered.size == MEDIUM.box

    def test_unknown_extension_has_no_encoder(self, png_bytes: bytes) -> None:
        with pytest.raises(ImageProcessingError):
            render_derivative(decode_image(png_bytes), THUMBNAIL, ".bmp")
