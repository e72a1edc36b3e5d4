"""Locate the palletcount.toml in effect for an invocation.

Lookup order: an explicit ``--config`` path, then ``PALLETCOUNT_CONFIG``,
then a walk up from the working directory (the way git finds ``.git/``).
Parsing is left to :class:`palletcount.config.settings.TomlSettingsSource`.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "palletcount.toml"
CONFIG_ENV_VAR = "PALLETCOUNT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Find palletcount.toml via ``PALLETCOUNT_CONFIG`` or a walk up from *start*.

    A ``PALLETCOUNT_CONFIG`` that points at a missing file disables
    discovery rather than falling back to the walk-up.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config(explicit: str | Path | None, start: Path | None = None) -> Path | None:
    """Return the config file for this run.

    Raises:
        FileNotFoundError: If *explicit* is given but is not a file.
    """
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise FileNotFoundError(path)
        return path
    return find_config(start)
