"""Configuration file model and I/O.

The configuration file supplies defaults for every command: the
snapshot directory, the subvolumes to snapshot, and the retention
duration used by cleanup. Explicit command-line options always take
precedence over these values.

Example ``/etc/btrsnap.toml``::

    snap-dir = "/mnt/top-level/.snapshots"
    subvol-base = "/mnt/top-level"
    subvol-names = ["@nixos", "@storage"]

    [cleanup]
    keep = "7d"
"""

import logging
import os
import tomllib
from datetime import timedelta
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from btrsnap.snapshots.retention import parse_duration

logger = logging.getLogger(__name__)

# Environment variable naming the configuration file
CONFIG_ENV_VAR = "BTRSNAP_CONFIG"


class CleanupConfig(BaseModel):
    """The ``[cleanup]`` table.

    Attributes:
        keep: Retention duration for ``btrsnap cleanup``.
    """

    model_config = ConfigDict(extra="forbid")

    keep: Annotated[
        timedelta | None,
        Field(description="Retention duration (e.g. '7d', '30m')"),
    ] = None

    @field_validator("keep", mode="before")
    @classmethod
    def parse_keep(cls, v: object) -> object:
        """Parse human-friendly duration strings."""
        if isinstance(v, str):
            try:
                return parse_duration(v)
            except ValueError as e:
                msg = f"Invalid 'cleanup.keep' duration in config: {v}"
                raise ValueError(msg) from e
        return v


class BtrsnapConfig(BaseModel):
    """Top-level configuration file.

    Attributes:
        snap_dir: Snapshot root directory (``snap-dir``).
        subvol_base: Directory containing the default subvolumes (``subvol-base``).
        subvol_names: Names of default subvolumes under subvol_base (``subvol-names``).
        cleanup: Cleanup settings.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    snap_dir: Annotated[Path, Field(alias="snap-dir", description="Snapshot directory")]
    subvol_base: Annotated[
        Path | None,
        Field(alias="subvol-base", description="Base directory of default subvolumes"),
    ] = None
    subvol_names: Annotated[
        list[str],
        Field(alias="subvol-names", default_factory=list, description="Default subvolume names"),
    ]
    cleanup: Annotated[CleanupConfig, Field(default_factory=CleanupConfig)]

    @field_validator("snap_dir", "subvol_base", mode="after")
    @classmethod
    def canonicalize(cls, v: Path | None) -> Path | None:
        """Resolve configured directories to existing absolute paths."""
        if v is None:
            return None
        return canonicalize_path(v)

    @field_validator("subvol_names", mode="after")
    @classmethod
    def validate_names(cls, v: list[str]) -> list[str]:
        """Reject names that are not a single path segment."""
        for name in v:
            if not name or "/" in name or name in (".", ".."):
                msg = f"Invalid subvolume name: {name!r}"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def require_base_with_names(self) -> "BtrsnapConfig":
        """Require subvol-base whenever subvol-names is non-empty."""
        if self.subvol_names and self.subvol_base is None:
            msg = "Missing 'subvol-base' (required when 'subvol-names' is provided)"
            raise ValueError(msg)
        return self

    @property
    def subvolumes(self) -> list[Path]:
        """Default source subvolumes (subvol-base joined with each name)."""
        if self.subvol_base is None:
            return []
        return [self.subvol_base / name for name in self.subvol_names]

    @property
    def keep(self) -> timedelta | None:
        """Default retention duration."""
        return self.cleanup.keep


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content does not match the schema."""


def canonicalize_path(path: Path) -> Path:
    """Resolve a path to an existing absolute path with symlinks and dot segments removed.

    Raises:
        ValueError: If the path does not exist or cannot be resolved.
    """
    try:
        return path.expanduser().resolve(strict=True)
    except FileNotFoundError as e:
        msg = f"Path {path} does not exist"
        raise ValueError(msg) from e
    except OSError as e:
        msg = f"Invalid path {path}: {e.strerror or e}"
        raise ValueError(msg) from e


def resolve_config_path(explicit: Path | None) -> Path | None:
    """Pick the configuration file to load.

    Priority:
    1. Explicit ``--config`` path
    2. ``$BTRSNAP_CONFIG``

    Returns:
        Path to load, or None when no configuration is in use.
    """
    if explicit is not None:
        return explicit
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value)
    return None


def load_config(path: Path) -> BtrsnapConfig:
    """Load and validate a configuration file.

    Args:
        path: Path to the TOML file.

    Returns:
        Validated BtrsnapConfig.

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    if not path.exists():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML in config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    try:
        config = BtrsnapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config file {path}: {e}") from e

    logger.debug("Loaded configuration from %s", path)
    return config


def save_config(config: BtrsnapConfig, path: Path) -> Path:
    """Save a configuration file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: Configuration to save.
        path: Destination path.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config_to_dict(config), f)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config file {path}: {e}") from e

    return path


def config_to_dict(config: BtrsnapConfig) -> dict[str, Any]:
    """Convert a configuration to the on-disk TOML layout.

    Only set values are included, keeping the file minimal.
    """
    result: dict[str, Any] = {"snap-dir": str(config.snap_dir)}

    if config.subvol_base is not None:
        result["subvol-base"] = str(config.subvol_base)

    if config.subvol_names:
        result["subvol-names"] = list(config.subvol_names)

    if config.cleanup.keep is not None:
        result["cleanup"] = {"keep": _duration_to_toml(config.cleanup.keep)}

    return result


def _duration_to_toml(duration: timedelta) -> str:
    """Render a duration so parse_duration reads it back unchanged."""
    total = duration.total_seconds()
    if not total.is_integer():
        fraction = format(total, "f").rstrip("0")
        return f"{fraction}s"
    seconds = int(total)
    for unit, size in (("w", 604800), ("d", 86400), ("h", 3600), ("m", 60)):
        if seconds % size == 0:
            return f"{seconds // size}{unit}"
    return f"{seconds}s"
