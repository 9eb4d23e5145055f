# ABOUTME: CLI package for Folio, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import click

from folio.cli.commands import book_cmd, image_cmd, import_cmd, verify_cmd
from folio.config import configure_logging


@click.group()
@click.version_option(package_name="folio")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Folio - cover image storage for a book library."""
    configure_logging(verbose)


cli.add_command(book_cmd.book)
cli.add_command(image_cmd.image)
cli.add_command(import_cmd.import_command)
cli.add_command(verify_cmd.verify)
