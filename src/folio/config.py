# ABOUTME: Default locations and limits for the Folio database and media tree.
# ABOUTME: Also installs Rich-backed logging for CLI runs.

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

FOLIO_HOME = Path.home() / ".folio"

DEFAULT_DB_PATH = FOLIO_HOME / "library.db"
DEFAULT_MEDIA_ROOT = FOLIO_HOME / "public"
DEFAULT_BASE_URL = "http://localhost:5000"

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp"})


def configure_logging(verbose: bool = False) -> None:
    """Route log records through a RichHandler on stderr.

    Safe to call more than once; an existing RichHandler is reused.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
