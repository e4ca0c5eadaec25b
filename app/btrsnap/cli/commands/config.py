"""Configuration file commands.

Shows the configuration in use and writes new configuration files.
"""

from pathlib import Path
from typing import Annotated, Any

import tomli_w
import typer
from pydantic import ValidationError

from btrsnap.cli.types import get_config
from btrsnap.core.config import BtrsnapConfig, ConfigError, config_to_dict, save_config
from btrsnap.utils.formatting import print_error, print_success

app = typer.Typer(
    help="Show or create configuration files.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the configuration in use as TOML.

    Paths are shown canonicalized, as the other commands see them.
    """
    config = get_config(ctx)
    if config is None:
        print_error("No configuration file in use. Pass --config or set BTRSNAP_CONFIG.")
        raise typer.Exit(code=1)

    typer.echo(tomli_w.dumps(config_to_dict(config)), nl=False)


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Argument(help="Configuration file to write."),
    ],
    snap_dir: Annotated[
        Path,
        typer.Option("--snap-dir", help="Snapshot directory."),
    ],
    subvol_base: Annotated[
        Path | None,
        typer.Option("--subvol-base", help="Directory containing the default subvolumes."),
    ] = None,
    subvol_names: Annotated[
        list[str] | None,
        typer.Option("--subvol-name", help="Default subvolume name under --subvol-base (repeatable)."),
    ] = None,
    keep: Annotated[
        str | None,
        typer.Option("--keep", help="Default retention duration for cleanup, e.g. '7d'."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a new configuration file.

    The directories must already exist.

    Examples:
        btrsnap config init /etc/btrsnap.toml --snap-dir /mnt/top/.snapshots \\
            --subvol-base /mnt/top --subvol-name @home --keep 7d
    """
    if path.exists() and not force:
        print_error(f"Config file already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    data: dict[str, Any] = {"snap-dir": snap_dir}
    if subvol_base is not None:
        data["subvol-base"] = subvol_base
    if subvol_names:
        data["subvol-names"] = subvol_names
    if keep is not None:
        data["cleanup"] = {"keep": keep}

    try:
        config = BtrsnapConfig.model_validate(data)
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e

    try:
        saved = save_config(config, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote configuration to {saved}")
