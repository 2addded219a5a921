"""Locating and reading ``invoicectl.toml``.

Lookup order: an explicit ``--config`` path, then ``INVOICECTL_CONFIG``,
then a walk up from the starting directory. The directory the file lives
in becomes the data root, the base for a relative ledger path.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, NamedTuple

import click

CONFIG_FILENAME = "invoicectl.toml"
CONFIG_ENV_VAR = "INVOICECTL_CONFIG"


class ConfigLocation(NamedTuple):
    """Where configuration came from and which directory the ledger hangs off."""

    path: Path | None
    data_root: Path


def find_config(start: Path | None = None) -> Path | None:
    """Return the config named by ``INVOICECTL_CONFIG`` or the nearest ``invoicectl.toml``.

    An env var naming a missing file yields None rather than falling back
    to the walk-up.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        named = Path(env_path)
        return named if named.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def locate_config(explicit: str | None = None, *, data_root: Path | None = None) -> ConfigLocation:
    """Resolve the config file and data root for one CLI invocation.

    *explicit* is the ``--config`` value; naming a missing file is an error.
    A given *data_root* is kept as-is and is also where discovery starts.
    """
    if explicit:
        path: Path | None = Path(explicit)
        if not path.is_file():
            msg = f"Config file not found: {explicit}"
            raise click.ClickException(msg)
    else:
        path = find_config(data_root)

    if data_root is None:
        data_root = path.parent if path is not None else Path.cwd()
    return ConfigLocation(path, data_root)


def read_config(path: Path | None) -> dict[str, Any]:
    """Parse *path* as TOML; no file means no overrides."""
    if path is None:
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc
