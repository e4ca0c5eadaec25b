"""Create command implementation.

Snapshots the selected subvolumes into the snapshot directory.
"""

from pathlib import Path
from typing import Annotated

import typer

from btrsnap.cli.types import COMMAND_ERRORS, build_manager, get_config, is_quiet
from btrsnap.core.privileges import require_root
from btrsnap.core.settings import resolve_snap_dir, resolve_subvolumes
from btrsnap.utils.formatting import print_error, print_success

app = typer.Typer(
    help="Create snapshots of subvolumes.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def create(
    ctx: typer.Context,
    subvols: Annotated[
        list[Path] | None,
        typer.Option(
            "--subvol",
            "-v",
            help="Subvolume to snapshot (repeatable). Defaults to the configured subvolumes.",
        ),
    ] = None,
    snap_dir: Annotated[
        Path | None,
        typer.Option(
            "--snap-dir",
            "-d",
            help="Directory to store the snapshots in.",
        ),
    ] = None,
) -> None:
    """Create a snapshot of each subvolume.

    Every snapshot of one run is named after its source subvolume and
    the shared creation time, e.g. ``@home-1700000000``.

    Examples:
        btrsnap create -v /mnt/top/@home -d /mnt/top/.snapshots
        btrsnap -c /etc/btrsnap.toml create
    """
    if ctx.invoked_subcommand is not None:
        return
    run_create(ctx, subvols or [], snap_dir)


def run_create(ctx: typer.Context, subvols: list[Path], snap_dir: Path | None) -> None:
    """Run the create operation and print each created snapshot.

    Also used when btrsnap is invoked without a subcommand.

    Raises:
        typer.Exit: With code 1 on any fatal error.
    """
    try:
        require_root()
    except PermissionError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    config = get_config(ctx)
    quiet = is_quiet(ctx)

    try:
        root = resolve_snap_dir(snap_dir, config)
        sources = resolve_subvolumes(subvols, config)
        manager = build_manager()
        for result in manager.create(sources, root):
            if not quiet:
                print_success(f"Created snapshot: {result.path}")
    except COMMAND_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
