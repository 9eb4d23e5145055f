# ABOUTME: Alternative image sources that feed the ingestion pipeline.
# ABOUTME: EPUB-embedded covers and remote URLs, each turned into an UploadedFile.

from folio.sources.epub import EpubReadError, extract_cover
from folio.sources.http import CoverFetchError, FolioHttpClient, HttpClient, fetch_cover

__all__ = [
    "CoverFetchError",
    "EpubReadError",
    "FolioHttpClient",
    "HttpClient",
    "extract_cover",
    "fetch_cover",
]
