# ABOUTME: The `folio image` command group for uploading and managing book images.
# ABOUTME: Provides upload, extract, fetch, ls, update, and rm subcommands.

import json
from collections.abc import Callable
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import base_url_option, db_option, media_root_option, open_service
from folio.core.service import ImageService
from folio.core.upload import UploadedFile, parse_declaration, parse_update_fields
from folio.db.mapping import IMAGE_TYPES, ImageRecord
from folio.errors import FolioError, NotFoundError

console = Console()


def _declaration_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that stores a new image."""
    options = [
        click.option("--book", "book_id", type=int, default=None, help="Owning book ID."),
        click.option(
            "--type", "image_type", type=click.Choice(IMAGE_TYPES), default="cover",
            show_default=True, help="Image type.",
        ),
        click.option("--alt", "alt_text", default=None, help="Alt text (default: filename)."),
        click.option("--caption", default="", help="Caption."),
        click.option("--copyright", "copyright_", default="", help="Copyright notice."),
        click.option(
            "--primary/--no-primary", "is_primary", default=False,
            help="Make this the book's primary cover.",
        ),
        click.option("--order", "display_order", type=int, default=0, help="Display order."),
        db_option,
        media_root_option,
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _store(
    upload: UploadedFile,
    *,
    book_id: int | None,
    image_type: str,
    alt_text: str | None,
    caption: str,
    copyright_: str,
    is_primary: bool,
    display_order: int,
    db_path: Path | None,
    media_root: Path | None,
) -> None:
    form = {
        "imageType": image_type,
        "altText": alt_text,
        "caption": caption,
        "copyright": copyright_,
        "isPrimary": is_primary,
        "displayOrder": display_order,
    }
    with open_service(db_path, media_root) as service:
        try:
            record = service.ingest(upload, book_id=book_id, declaration=parse_declaration(form))
        except FolioError as exc:
            console.print(f"[red]Upload failed:[/red] {exc}")
            raise SystemExit(1) from exc

    primary = " [green](primary cover)[/green]" if record.is_primary else ""
    console.print(
        f"Stored image [bold]{record.id}[/bold] ({record.width}x{record.height}){primary}"
    )


@click.group("image")
def image() -> None:
    """Upload and manage book images."""


@image.command("upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--mime", "mime_type", default=None, help="Declared MIME type (default: guessed).")
@_declaration_options
def image_upload(path: Path, mime_type: str | None, **options: Any) -> None:
    """Store an image file and its derivatives."""
    try:
        upload = UploadedFile.from_path(path, mime_type=mime_type)
    except FolioError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    _store(upload, **options)


@image.command("extract")
@click.argument("epub_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_declaration_options
def image_extract(epub_path: Path, **options: Any) -> None:
    """Store the cover image embedded in an EPUB."""
    from folio.sources.epub import extract_cover

    try:
        upload = extract_cover(epub_path)
    except FolioError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    _store(upload, **options)


@image.command("fetch")
@click.argument("url")
@_declaration_options
def image_fetch(url: str, **options: Any) -> None:
    """Download an image from URL and store it."""
    from folio.sources.http import FolioHttpClient, fetch_cover

    client = FolioHttpClient()
    try:
        upload = fetch_cover(url, client)
    except FolioError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc
    finally:
        client.close()
    _store(upload, **options)


def _image_payload(service: ImageService, record: ImageRecord, base_url: str) -> dict:
    payload = asdict(record)
    payload["urls"] = service.image_urls(record, base_url)
    return payload


@image.command("ls")
@click.argument("book_id", type=int)
@click.option(
    "--type", "image_type", type=click.Choice(IMAGE_TYPES), default=None,
    help="Only list images of this type.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON with URLs.")
@db_option
@media_root_option
@base_url_option
def image_ls(
    book_id: int,
    image_type: str | None,
    as_json: bool,
    db_path: Path | None,
    media_root: Path | None,
    base_url: str,
) -> None:
    """List a book's images, primary cover first."""
    with open_service(db_path, media_root) as service:
        try:
            records = service.list_for_book(book_id, image_type)
        except FolioError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        payloads = [_image_payload(service, r, base_url) for r in records]

    if as_json:
        click.echo(json.dumps(payloads, indent=2))
        return

    if not records:
        console.print(f"[yellow]No images for book {book_id}.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Type")
    table.add_column("Primary", width=7)
    table.add_column("Order", justify="right")
    table.add_column("Size")
    table.add_column("Alt text")

    for record in records:
        table.add_row(
            str(record.id),
            record.image_type,
            "yes" if record.is_primary else "",
            str(record.display_order),
            f"{record.width}x{record.height}",
            record.alt_text or "",
        )

    console.print(table)
    console.print(f"\n[dim]{len(records)} image(s)[/dim]")


@image.command("update")
@click.argument("image_id", type=int)
@click.option(
    "--set", "assignments", multiple=True, metavar="FIELD=VALUE",
    help="Field to change, e.g. isPrimary=true or caption=Front. Repeatable.",
)
@db_option
@media_root_option
def image_update(
    image_id: int,
    assignments: tuple[str, ...],
    db_path: Path | None,
    media_root: Path | None,
) -> None:
    """Change an image's metadata; only the given fields are touched."""
    form: dict[str, str] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep:
            raise click.BadParameter(
                f"expected FIELD=VALUE, got {assignment!r}", param_hint="--set"
            )
        form[name.strip()] = value

    with open_service(db_path, media_root) as service:
        try:
            result = service.update(image_id, parse_update_fields(form))
        except NotFoundError as exc:
            console.print(f"[red]Image {image_id} not found.[/red]")
            raise SystemExit(1) from exc
        except FolioError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    if not result.updated:
        console.print("[yellow]No fields to update.[/yellow]")
        return
    console.print(f"Updated image {image_id}.")


@image.command("rm")
@click.argument("image_id", type=int)
@db_option
@media_root_option
def image_rm(image_id: int, db_path: Path | None, media_root: Path | None) -> None:
    """Delete an image and its files."""
    with open_service(db_path, media_root) as service:
        try:
            service.delete(image_id)
        except NotFoundError as exc:
            console.print(f"[red]Image {image_id} not found.[/red]")
            raise SystemExit(1) from exc
        except FolioError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

    console.print(f"Deleted image {image_id}.")
