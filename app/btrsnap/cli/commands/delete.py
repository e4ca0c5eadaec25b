"""Delete command implementation.

Deletes explicitly named snapshots.
"""

from pathlib import Path
from typing import Annotated

import typer

from btrsnap.cli.types import COMMAND_ERRORS, build_manager, is_quiet
from btrsnap.core.config import canonicalize_path
from btrsnap.core.privileges import require_root
from btrsnap.utils.formatting import print_error, print_success

app = typer.Typer(
    help="Delete snapshots.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def delete(
    ctx: typer.Context,
    snaps: Annotated[
        list[Path] | None,
        typer.Option(
            "--snap",
            "-s",
            help="Snapshot to delete (repeatable).",
        ),
    ] = None,
) -> None:
    """Delete the given snapshots.

    Every path must exist before anything is deleted. Stops at the first
    snapshot that cannot be deleted; snapshots after it are left in place.

    Examples:
        btrsnap delete -s /mnt/top/.snapshots/@home-1700000000
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = is_quiet(ctx)
    try:
        require_root()
        targets = [canonicalize_path(snap) for snap in snaps or []]
        manager = build_manager()
        for result in manager.delete(targets):
            if not quiet:
                print_success(f"Deleted: {result.path}")
    except COMMAND_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
