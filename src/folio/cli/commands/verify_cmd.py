# ABOUTME: The `folio verify` command for checking image storage integrity.
# ABOUTME: Detects rows with missing files and files no row references.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from folio.cli.options import db_option, media_root_option, open_service
from folio.core.verifier import verify_storage

console = Console()


@click.command("verify")
@db_option
@media_root_option
@click.option(
    "--orphans/--no-orphans",
    "check_orphans",
    default=True,
    help="Also report stored files that no image row references.",
)
def verify(db_path: Path | None, media_root: Path | None, check_orphans: bool) -> None:
    """Verify storage integrity: every row has its files, every file has a row."""
    with open_service(db_path, media_root) as service:
        result = verify_storage(service.store, service.storage, check_orphans=check_orphans)
        root = service.storage.root

    if result.total_issues > 0:
        table = Table()
        table.add_column("Image", style="dim", width=6)
        table.add_column("Issue", style="red", no_wrap=True)
        table.add_column("Path")

        for missing in result.missing:
            table.add_row(str(missing.image.id), f"Missing {missing.role}", missing.locator)

        for orphan in result.orphans:
            table.add_row("-", "Orphan file", "/" + orphan.relative_to(root).as_posix())

        console.print(table)
        console.print(
            f"\n[red]{result.total_issues} issue(s) found, {result.ok} image(s) verified.[/red]"
        )
        raise SystemExit(1)

    console.print(f"[green]All {result.ok} image(s) verified.[/green]")
