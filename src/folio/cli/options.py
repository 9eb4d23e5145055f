# ABOUTME: Shared Click options and session setup for Folio CLI commands.
# ABOUTME: Provides --db/--media-root/--base-url and a context manager yielding an ImageService.

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from folio.config import DEFAULT_BASE_URL, DEFAULT_DB_PATH, DEFAULT_MEDIA_ROOT
from folio.core.service import ImageService
from folio.db.connection import open_library
from folio.storage import MediaStorage

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    envvar="FOLIO_DB",
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)

media_root_option = click.option(
    "--media-root",
    "media_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="FOLIO_MEDIA_ROOT",
    help=f"Directory image files are stored under (default: {DEFAULT_MEDIA_ROOT})",
)

base_url_option = click.option(
    "--base-url",
    "base_url",
    default=DEFAULT_BASE_URL,
    show_default=True,
    envvar="FOLIO_BASE_URL",
    help="Public URL prefix for absolute image links.",
)


@contextmanager
def open_service(db_path: Path | None, media_root: Path | None) -> Iterator[ImageService]:
    """Open the library and media tree for one command; closes the connection on exit."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        yield ImageService(conn, MediaStorage(media_root or DEFAULT_MEDIA_ROOT))
    finally:
        conn.close()
