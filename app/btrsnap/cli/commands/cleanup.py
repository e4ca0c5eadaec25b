"""Cleanup command implementation.

Deletes snapshots older than the retention duration.
"""

from pathlib import Path
from typing import Annotated

import typer

from btrsnap.cli.types import COMMAND_ERRORS, build_manager, get_config, is_quiet
from btrsnap.core.privileges import require_root
from btrsnap.core.settings import resolve_keep, resolve_snap_dir
from btrsnap.snapshots import SnapshotActionResult, parse_duration
from btrsnap.utils.formatting import print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Delete snapshots older than a retention duration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def cleanup(
    ctx: typer.Context,
    directory: Annotated[
        Path | None,
        typer.Option(
            "--dir",
            "-d",
            help="Snapshot directory to clean. Defaults to the configured snap-dir.",
        ),
    ] = None,
    keep: Annotated[
        str | None,
        typer.Option(
            "--keep",
            "-k",
            help="Retention duration, e.g. '7d', '12h', '1w 2d'. Defaults to cleanup.keep.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
) -> None:
    """Delete snapshots created more than KEEP ago.

    Only entries named ``<subvolume>-<unix seconds>`` that are btrfs
    subvolumes are considered. A snapshot that fails to delete is
    reported and the sweep continues.

    Examples:
        btrsnap cleanup -d /mnt/top/.snapshots -k 7d
        btrsnap cleanup --dry-run
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        require_root()
    except PermissionError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    config = get_config(ctx)
    quiet = is_quiet(ctx)

    results: list[SnapshotActionResult] = []
    try:
        root = resolve_snap_dir(directory, config, option="--dir")
        keep_duration = resolve_keep(parse_duration(keep) if keep is not None else None, config)
        for result in build_manager().cleanup(root, keep_duration, dry_run=dry_run):
            results.append(result)
            _print_result(result, quiet)
    except COMMAND_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not quiet and not results:
        print_info("No expired snapshots found.")

    failed = sum(1 for r in results if not r.success)
    if failed:
        print_warning(f"{failed} snapshot(s) could not be deleted.")


def _print_result(result: SnapshotActionResult, quiet: bool) -> None:
    """Print a single cleanup result as it happens."""
    if not result.success:
        print_warning(f"Failed to clean {result.path}: {result.error}")
    elif quiet:
        return
    elif result.dry_run:
        print_info(f"Would clean: {result.path}")
    else:
        print_success(f"Cleaned: {result.path}")
