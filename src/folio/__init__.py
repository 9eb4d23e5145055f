# ABOUTME: Folio - cover image ingestion and catalog backend for a book library.
# ABOUTME: Package root; version string used by the CLI and HTTP User-Agent.

__version__ = "0.1.0"
