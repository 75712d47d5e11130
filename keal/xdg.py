"""Locations of XDG data, configuration and state directories."""

from __future__ import annotations

import os
from pathlib import Path


class XdgError(LookupError):
    """Raised when no base directory can be worked out from the environment."""


def xdg_directories(subdir: str | os.PathLike[str]) -> list[Path]:
    """Return `subdir` inside every XDG data directory, user directory last."""
    data_dirs = [
        Path(part)
        for part in os.environ.get("XDG_DATA_DIRS", "/usr/local/share:/usr/share").split(":")
    ]

    data_home = os.environ.get("XDG_DATA_HOME")
    home = os.environ.get("HOME")
    if data_home is not None:
        data_dirs.append(Path(data_home))
    elif home is not None:
        data_dirs.append(Path(home) / ".local/share")

    return [path / subdir for path in data_dirs]


def _base_dir(variable: str, home_relative: str) -> Path:
    value = os.environ.get(variable)
    if value is not None:
        base = Path(value)
    else:
        home = os.environ.get("HOME")
        if home is None:
            raise XdgError(f"neither ${variable} nor $HOME are defined")
        base = Path(home) / home_relative
    return base / "keal"


def config_dir() -> Path:
    """Return the equivalent of ~/.config/keal."""
    return _base_dir("XDG_CONFIG_HOME", ".config")


def state_dir() -> Path:
    """Return the equivalent of ~/.local/state/keal."""
    return _base_dir("XDG_STATE_HOME", ".local/state")