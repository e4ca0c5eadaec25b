"""List command implementation.

Shows the subvolumes in a snapshot directory with their btrfs metadata.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from btrsnap.cli.types import COMMAND_ERRORS, OutputFormat, build_manager, get_config
from btrsnap.core.privileges import require_root
from btrsnap.core.settings import resolve_snap_dir
from btrsnap.snapshots import SnapshotRecord
from btrsnap.utils.formatting import console, create_snapshot_table, print_error, print_info

app = typer.Typer(
    help="List snapshots.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_snapshots(
    ctx: typer.Context,
    directory: Annotated[
        Path | None,
        typer.Option(
            "--dir",
            "-d",
            help="Snapshot directory to list. Defaults to the configured snap-dir.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """List snapshots with their generation and origin transaction id.

    Entries that are not subvolumes are skipped.

    Examples:
        btrsnap list -d /mnt/top/.snapshots
        btrsnap list --format json
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        require_root()
    except PermissionError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    config = get_config(ctx)

    try:
        root = resolve_snap_dir(directory, config, option="--dir")
        records = list(build_manager().list(root))
    except COMMAND_ERRORS as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        _print_json(records)
        return

    if not records:
        print_info(f"No snapshots found in {root}")
        return

    _print_table(records, root)


def _print_table(records: list[SnapshotRecord], root: Path) -> None:
    """Display snapshots as a Rich table."""
    table = create_snapshot_table(title=f"Snapshots in {root}")
    for record in records:
        identity = record.identity
        table.add_row(
            str(record.path),
            identity.source_name if identity else "-",
            identity.created_at.isoformat() if identity else "-",
            str(record.generation),
            str(record.origin_transaction_id),
        )
    console.print(table)


def _print_json(records: list[SnapshotRecord]) -> None:
    """Display snapshots as JSON."""
    data = [
        {
            "path": str(r.path),
            "source": r.identity.source_name if r.identity else None,
            "created_at": r.identity.created_at.isoformat() if r.identity else None,
            "generation": r.generation,
            "origin_transaction_id": r.origin_transaction_id,
        }
        for r in records
    ]
    console.print_json(json.dumps(data))
