# ABOUTME: The `folio book` command group for managing cataloged books.
# ABOUTME: Provides add, ls, info, and rm; rm also removes the book's stored images.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import db_option, media_root_option, open_service
from folio.errors import FolioError

console = Console()


@click.group("book")
def book() -> None:
    """Manage cataloged books."""


@book.command("add")
@click.argument("title")
@click.option("--author", default=None, help="Author name.")
@click.option("--category", default=None, help="Category, e.g. Fiction.")
@click.option("--isbn", default=None, help="ISBN-10 or ISBN-13.")
@db_option
@media_root_option
def book_add(
    title: str,
    author: str | None,
    category: str | None,
    isbn: str | None,
    db_path: Path | None,
    media_root: Path | None,
) -> None:
    """Add a book to the catalog."""
    with open_service(db_path, media_root) as service:
        try:
            book_id = service.catalog.add_book(
                title, author=author, category=category, isbn=isbn
            )
        except FolioError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"Added book [bold]{book_id}[/bold]: {title}")


@book.command("ls")
@click.option("--category", "category_filter", default=None, help="Filter by category.")
@db_option
@media_root_option
def book_ls(category_filter: str | None, db_path: Path | None, media_root: Path | None) -> None:
    """List all books in the catalog."""
    with open_service(db_path, media_root) as service:
        if category_filter:
            records = service.catalog.list_by_category(category_filter)
        else:
            records = service.catalog.list_all()

    if not records:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Category")
    table.add_column("Cover", width=5)

    for record in records:
        table.add_row(
            str(record.id),
            record.title,
            record.author or "[dim]unknown[/dim]",
            record.category or "",
            "yes" if record.cover_image_ref else "no",
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} book(s)[/dim]")


@book.command("info")
@click.argument("book_id", type=int)
@db_option
@media_root_option
def book_info(book_id: int, db_path: Path | None, media_root: Path | None) -> None:
    """Show a book and its cover reference."""
    with open_service(db_path, media_root) as service:
        record = service.catalog.get_by_id(book_id)
        if record is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)
        images = service.store.list_for_book(book_id)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=10)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Title", record.title)
    table.add_row("Author", record.author or "unknown")
    table.add_row("Category", record.category or "uncategorized")
    if record.isbn:
        table.add_row("ISBN", record.isbn)
    table.add_row("Cover", record.cover_image_ref or "none")
    table.add_row("Images", str(len(images)))
    table.add_row("Added", record.date_added)
    table.add_row("Modified", record.date_modified)

    console.print(table)


@book.command("rm")
@click.argument("book_id", type=int)
@db_option
@media_root_option
def book_rm(book_id: int, db_path: Path | None, media_root: Path | None) -> None:
    """Delete a book and all of its stored images."""
    with open_service(db_path, media_root) as service:
        try:
            removed = service.delete_book(book_id)
        except FolioError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"Deleted book {book_id} and {removed} image(s).")
