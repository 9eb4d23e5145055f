# ABOUTME: SQL DDL statements for the Folio library database schema.
# ABOUTME: Defines the books and image_metadata tables plus ordered migrations.

SCHEMA_V1 = """
-- Books that images can be attached to
CREATE TABLE books (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    title           TEXT NOT NULL,
    author          TEXT,
    category        TEXT,
    isbn            TEXT,
    cover_image_ref TEXT,
    date_added      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    date_modified   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX idx_books_category ON books(category);
CREATE INDEX idx_books_author ON books(author);
CREATE UNIQUE INDEX idx_books_isbn ON books(isbn) WHERE isbn IS NOT NULL;

-- One row per stored image; the three paths are locators under the media root
CREATE TABLE image_metadata (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id           INTEGER REFERENCES books(id) ON DELETE CASCADE,
    image_type        TEXT NOT NULL DEFAULT 'cover'
                      CHECK (image_type IN ('cover', 'interior')),
    original_path     TEXT NOT NULL,
    thumbnail_path    TEXT NOT NULL,
    medium_path       TEXT NOT NULL,
    original_filename TEXT,
    alt_text          TEXT,
    caption           TEXT NOT NULL DEFAULT '',
    copyright         TEXT NOT NULL DEFAULT '',
    width             INTEGER NOT NULL,
    height            INTEGER NOT NULL,
    size_bytes        INTEGER,
    mime_type         TEXT,
    is_primary        INTEGER NOT NULL DEFAULT 0,
    display_order     INTEGER NOT NULL DEFAULT 0,
    created_at        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX idx_image_book_id ON image_metadata(book_id);
CREATE INDEX idx_image_type ON image_metadata(image_type);
CREATE INDEX idx_image_primary ON image_metadata(is_primary);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# V2: the database itself refuses a second primary cover for the same book.
MIGRATION_V2 = """
CREATE UNIQUE INDEX idx_image_one_primary_cover
    ON image_metadata(book_id)
    WHERE image_type = 'cover' AND is_primary = 1 AND book_id IS NOT NULL;

INSERT INTO schema_version (version) VALUES (2);
"""

MIGRATIONS: list[tuple[int, str]] = [
    (2, MIGRATION_V2),
]
