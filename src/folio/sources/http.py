# ABOUTME: HTTP client for downloading cover images from remote URLs.
# ABOUTME: Provides rate limiting, retry with backoff, and injectable transport for testing.

import logging
import time
from pathlib import PurePosixPath
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlparse

import httpx

from folio import __version__
from folio.config import MAX_UPLOAD_BYTES
from folio.core.upload import UploadedFile, guess_mime_type
from folio.errors import FolioError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class CoverFetchError(FolioError):
    """Raised when a cover image cannot be downloaded."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for fetching raw bytes over HTTP."""

    def get_bytes(self, url: str) -> tuple[bytes, str | None]: ...


class FolioHttpClient:
    """HTTP client with rate limiting and retry for cover downloads.

    Wraps httpx.Client with configurable request intervals and retry logic
    for transient failures (429, 5xx).
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"folio/{__version__}"},
            "timeout": 30.0,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._last_request_time: float = 0.0

    def get_bytes(self, url: str) -> tuple[bytes, str | None]:
        """Send a GET request with rate limiting and retry.

        Returns:
            The response body and its Content-Type (without parameters), if any.

        Raises:
            CoverFetchError: On non-retryable HTTP errors, exhausted retries,
                or a body larger than MAX_UPLOAD_BYTES.
        """
        self._rate_limit()

        attempts = 1 + self._max_retries
        last_status = 0
        for attempt in range(attempts):
            try:
                response = self._client.get(url)
                last_status = response.status_code
            except httpx.HTTPError as exc:
                raise CoverFetchError(f"Request failed: {url}: {exc}") from exc

            if response.status_code == 200:
                body = response.content
                if len(body) > MAX_UPLOAD_BYTES:
                    raise CoverFetchError(f"{url} is larger than {MAX_UPLOAD_BYTES} bytes")
                content_type = response.headers.get("content-type")
                if content_type:
                    content_type = content_type.split(";", 1)[0].strip() or None
                return body, content_type

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise CoverFetchError(f"HTTP {response.status_code} from {url}")

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise CoverFetchError(f"HTTP {last_status} from {url} after {attempts} attempts")

    def close(self) -> None:
        self._client.close()

    def _rate_limit(self) -> None:
        """Sleep if needed to maintain minimum interval between requests."""
        if self._min_interval <= 0:
            return
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if elapsed < self._min_interval and self._last_request_time > 0:
            time.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()


def filename_from_url(url: str, fallback: str = "cover.jpg") -> str:
    """The last path segment of a URL, or fallback when it has none."""
    name = PurePosixPath(urlparse(url).path).name
    return name or fallback


def fetch_cover(url: str, client: HttpClient) -> UploadedFile:
    """Download an image and wrap it as an upload ready for ingestion."""
    data, content_type = client.get_bytes(url)
    filename = filename_from_url(url)
    logger.info("Downloaded %d bytes from %s", len(data), url)
    return UploadedFile(
        filename=filename,
        data=data,
        mime_type=content_type or guess_mime_type(filename),
        size=len(data),
    )
