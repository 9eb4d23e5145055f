# ABOUTME: The `folio import` command for bulk-storing a directory of images for a book.
# ABOUTME: Walks the directory, ingests each image, and prints a summary.

from pathlib import Path

import click
from rich.console import Console

from folio.cli.options import db_option, media_root_option, open_service
from folio.core.importer import find_images, import_images
from folio.db.mapping import IMAGE_TYPES
from folio.errors import NotFoundError

console = Console()


@click.command("import")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--book", "book_id", type=int, required=True, help="Book the images belong to.")
@click.option(
    "--type", "image_type", type=click.Choice(IMAGE_TYPES), default="cover",
    show_default=True, help="Type recorded for every imported image.",
)
@click.option(
    "--primary-first",
    is_flag=True,
    default=False,
    help="Make the first imported cover the book's primary cover.",
)
@db_option
@media_root_option
def import_command(
    directory: Path,
    book_id: int,
    image_type: str,
    primary_first: bool,
    db_path: Path | None,
    media_root: Path | None,
) -> None:
    """Scan a directory for image files and store them for a book."""
    image_files = find_images(directory)

    if not image_files:
        console.print(f"[yellow]No image files found in {directory}[/yellow]")
        return

    console.print(f"Found [bold]{len(image_files)}[/bold] image file(s)\n")

    with open_service(db_path, media_root) as service:
        try:
            result = import_images(
                image_files, service, book_id,
                image_type=image_type, primary_first=primary_first,
            )
        except NotFoundError as exc:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1) from exc

    parts = [f"[green]{len(result.added)} added[/green]"]
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")
    console.print(", ".join(parts))

    if result.error_details:
        console.print(
            f"\n[yellow]{result.errors} file(s) could not be stored:[/yellow]"
        )
        for path, msg in result.error_details:
            console.print(f"  [dim]{path.name}:[/dim] {msg}")
