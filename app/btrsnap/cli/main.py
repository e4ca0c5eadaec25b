"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from btrsnap import __version__
from btrsnap.cli.commands import cleanup, config, create, delete, listing
from btrsnap.core.logging import configure_logging

# Create main Typer app
app = typer.Typer(
    name="btrsnap",
    help="Create, list and expire btrfs subvolume snapshots.",
    invoke_without_command=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"btrsnap version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file. Defaults to $BTRSNAP_CONFIG.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """btrsnap - btrfs snapshot lifecycle and retention.

    Without a subcommand, snapshots the configured subvolumes
    (same as [bold]btrsnap create[/bold]).
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path

    if ctx.invoked_subcommand is None:
        create.run_create(ctx, [], None)


# Register commands
app.add_typer(create.app, name="create")
app.add_typer(delete.app, name="delete")
app.add_typer(listing.app, name="list")
app.add_typer(cleanup.app, name="cleanup")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
