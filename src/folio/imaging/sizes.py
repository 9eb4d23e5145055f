# ABOUTME: Fixed derivative sizes produced for every stored image.
# ABOUTME: Each size is a bounding box plus the encoder quality used for it.

from dataclasses import dataclass


@dataclass(frozen=True)
class DerivativeSize:
    """A bounding box an image is fitted into, and the quality it is encoded at."""

    name: str
    width: int
    height: int
    quality: int

    @property
    def box(self) -> tuple[int, int]:
        return (self.width, self.height)


THUMBNAIL = DerivativeSize("thumbnail", 200, 300, 80)
MEDIUM = DerivativeSize("medium", 500, 750, 85)
# Defined for parity with the frontend's size table; ingestion does not produce it.
LARGE = DerivativeSize("large", 1000, 1500, 90)

INGEST_SIZES = (THUMBNAIL, MEDIUM)
