"""How often entries are chosen, kept on disk between runs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import cbor2

from keal.timing import log_time
from keal.xdg import state_dir


def usage_file_path() -> Path:
    """Path of the usage file; creates the state directory if it is missing."""
    directory = state_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    return directory / "usage.cbor"


def _decode(data: object) -> dict[tuple[str, str], int]:
    if not isinstance(data, dict):
        raise ValueError("usage data is not a map")
    counts: dict[tuple[str, str], int] = {}
    for key, value in data.items():
        if not (isinstance(key, (tuple, list)) and len(key) == 2 and all(isinstance(k, str) for k in key)):
            raise ValueError("invalid usage key")
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValueError("invalid usage count")
        counts[(key[0], key[1])] = value
    return counts


@dataclass
class Usage:
    """Use counts keyed by (plugin name, entry name)."""

    counts: dict[tuple[str, str], int] = field(default_factory=dict)
    path: Path | None = None

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Usage:
        """Read the usage file; an unreadable file is deleted and counts start empty."""
        log_time("loading usage")
        path = Path(path) if path is not None else usage_file_path()
        try:
            with path.open("rb") as file:
                try:
                    counts = _decode(cbor2.load(file))
                except (cbor2.CBORError, ValueError, TypeError, EOFError):
                    counts = None
        except OSError:
            return cls(path=path)

        if counts is None:
            try:
                path.unlink()
            except OSError:
                pass
            return cls(path=path)
        return cls(counts=counts, path=path)

    def get(self, plugin: str, entry: str) -> int | None:
        """Number of uses of an entry, or None if it was never used."""
        return self.counts.get((plugin, entry))

    def add_use(self, plugin: str, entry: str) -> None:
        """Count one more use of an entry and save."""
        key = (plugin, entry)
        self.counts[key] = self.counts.get(key, 0) + 1
        self.save()

    def save(self) -> None:
        """Write the counts to the usage file."""
        path = self.path if self.path is not None else usage_file_path()
        with path.open("wb") as file:
            cbor2.dump(self.counts, file)